"""Dependency discovery and depth-first prerequisite installation."""
from __future__ import annotations

import logging
import re
from typing import Callable, Optional, Sequence, Tuple

from constants import Constants
from errors import CyclicDependency, MultipleRecordsFailure, ResolutionFailure
from common.cache import TTLCache
from common.logging_utils import extra_context, is_debug_enabled
from gateway.base import EnvironmentGateway
from gateway.models import QueryResult, SubscriberPackageVersion

logger = logging.getLogger(__name__)

_SALESFORCE_ID = re.compile(r"^[a-zA-Z0-9]{15}(?:[a-zA-Z0-9]{3})?$")

VERSION_SOQL = (
    "SELECT Id, SubscriberPackageId, MajorVersion, MinorVersion, PatchVersion, "
    "BuildNumber, Package2ContainerOptions, Dependencies "
    "FROM SubscriberPackageVersion WHERE Id='{}'"
)
PACKAGE_SOQL = "SELECT Name FROM SubscriberPackage WHERE Id='{}'"

# Called as install(username, version_id, path) for each dependency
InstallFn = Callable[[str, str, Tuple[str, ...]], None]


class DependencyWalker:
    """Look up package version metadata in an org and install prerequisites.

    Metadata is cached per (username, version id) in the walker's TTLCache.
    """

    def __init__(self, gateway: EnvironmentGateway, cache: Optional[TTLCache] = None):
        self.gateway = gateway
        self.cache = cache if cache is not None else TTLCache(Constants.CACHE_TTL_SEC)

    def reset(self) -> None:
        self.cache.reset()

    def _single(self, entity: str, identifier: str, result: QueryResult) -> dict:
        if result.size > 1 or len(result.records) > 1:
            raise MultipleRecordsFailure(entity, identifier, max(result.size, len(result.records)))
        if not result.records:
            raise ResolutionFailure(entity, identifier)
        return result.records[0]

    def get_package_name(self, username: str, package_id: str) -> str:
        """Return the name of a subscriber package."""
        _check_id("subscriber package", package_id)
        result = self.gateway.query(username, PACKAGE_SOQL.format(package_id))
        record = self._single("Subscriber Package", package_id, result)
        return record.get("Name", "")

    def get_version(self, username: str, version_id: str) -> SubscriberPackageVersion:
        """Return metadata for a subscriber package version, including its name."""
        key = f"{username}:{version_id}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        _check_id("package version", version_id)
        result = self.gateway.query(username, VERSION_SOQL.format(version_id))
        record = self._single("Subscriber Package Version", version_id, result)
        package_id = record.get("SubscriberPackageId", "")
        name = self.get_package_name(username, package_id)
        version = SubscriberPackageVersion.from_record(record, package_name=name)
        self.cache.set(key, version)
        return version

    def install_dependencies(
        self,
        username: str,
        version_id: str,
        install: InstallFn,
        path: Sequence[str] = (),
    ) -> SubscriberPackageVersion:
        """Install every dependency of version_id, depth-first, in declared order.

        Args:
            username: Target org username.
            version_id: Package version whose prerequisites are installed.
            install: Full install operation invoked for each dependency.
            path: Version ids on the current install path, outermost first.

        Returns:
            The metadata of version_id.

        Raises:
            CyclicDependency: version_id already appears on path.
        """
        if version_id in path:
            raise CyclicDependency(list(path) + [version_id])

        version = self.get_version(username, version_id)
        if not version.dependency_ids:
            return version

        logger.info(
            "Installing Dependencies for package: %s - %s", version.package_name, version.version_id
        )
        child_path = tuple(path) + (version_id,)
        for dep_id in version.dependency_ids:
            if dep_id in child_path:
                raise CyclicDependency(list(child_path) + [dep_id])
            if is_debug_enabled(logger):
                logger.debug(
                    "Dependency",
                    extra=extra_context(
                        event="dependency",
                        component="walker",
                        action="install",
                        parent=version_id,
                        target=dep_id,
                        depth=len(child_path),
                    ),
                )
            install(username, dep_id, child_path)
        return version


def _check_id(kind: str, identifier: str) -> None:
    """Reject values that are not Salesforce ids before they reach a query string."""
    if not identifier or not _SALESFORCE_ID.match(identifier):
        raise ResolutionFailure(kind, identifier)
