"""Identity resolution for orgs and package versions.

Maps user-supplied aliases and ids to the canonical identifiers the CLI
expects: usernames for orgs and subscriber package version ids (``04t``) for
packages. Org and version lists are fetched from the gateway once and held in
a TTLCache owned by the resolver.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple, Union

from constants import Constants
from errors import ResolutionFailure
from common.cache import TTLCache
from common.logging_utils import extra_context, is_debug_enabled
from gateway.base import EnvironmentGateway
from gateway.models import Org, PackageVersion, ScratchOrg
from versioning.models import AliasKind, ResolutionMode
from versioning.parser import parse_package_token, pick_latest

logger = logging.getLogger(__name__)

_ORGS_KEY = "orgs"
_VERSIONS_KEY = "package_versions"

AnyOrg = Union[Org, ScratchOrg]


class IdentityResolver:
    """Resolve org and package aliases with populate-once caching."""

    def __init__(
        self,
        gateway: EnvironmentGateway,
        cache: Optional[TTLCache] = None,
        version_ordering: Optional[str] = None,
    ):
        self.gateway = gateway
        self.cache = cache if cache is not None else TTLCache(Constants.CACHE_TTL_SEC)
        self.version_ordering = version_ordering

    def reset(self) -> None:
        """Forget cached org and version lists."""
        self.cache.reset()

    # ---------- orgs ----------

    def _orgs(self) -> Tuple[List[Org], List[ScratchOrg]]:
        cached = self.cache.get(_ORGS_KEY)
        if cached is not None:
            return cached
        orgs = self.gateway.list_orgs()
        self.cache.set(_ORGS_KEY, orgs)
        if is_debug_enabled(logger):
            logger.debug(
                "Org list cached",
                extra=extra_context(
                    event="cache_fill",
                    component="resolver",
                    action="list_orgs",
                    count=len(orgs[0]) + len(orgs[1]),
                ),
            )
        return orgs

    def resolve_environment(self, alias: str) -> str:
        """Return the username for an org alias, org id, or username.

        Persistent orgs are searched before scratch orgs; the first match wins.
        """
        # already in the username form
        if "@" in alias:
            return alias

        org = self.find_org(alias)
        if org is None:
            raise ResolutionFailure("environment", alias)
        logger.debug("Resolved org %s to %s", alias, org.username)
        return org.username

    def find_org(self, alias: str) -> Optional[AnyOrg]:
        """Return the org matching an id or alias, or None."""
        persistent, scratch = self._orgs()
        is_id = alias.startswith(Constants.ORG_ID_PREFIX)
        for org in list(persistent) + list(scratch):
            if is_id and _same_org_id(org.org_id, alias):
                return org
            if not is_id and org.alias == alias:
                return org
        return None

    def find_org_by_id(self, org_id: str) -> AnyOrg:
        """Return the org with the given id or raise ResolutionFailure."""
        persistent, scratch = self._orgs()
        for org in list(persistent) + list(scratch):
            if _same_org_id(org.org_id, org_id):
                return org
        raise ResolutionFailure("environment", org_id)

    def dev_hub(self) -> Org:
        """Return the default dev hub org."""
        persistent, _ = self._orgs()
        for org in persistent:
            if org.is_dev_hub and org.default_marker == Constants.DEFAULT_MARKER:
                return org
        raise ResolutionFailure("dev hub", "default")

    # ---------- package versions ----------

    def _versions(self) -> List[PackageVersion]:
        cached = self.cache.get(_VERSIONS_KEY)
        if cached is not None:
            return cached
        versions = self.gateway.list_package_versions()
        self.cache.set(_VERSIONS_KEY, versions)
        if is_debug_enabled(logger):
            logger.debug(
                "Package version list cached",
                extra=extra_context(
                    event="cache_fill",
                    component="resolver",
                    action="list_package_versions",
                    count=len(versions),
                ),
            )
        return versions

    def resolve_package_version(self, alias: str) -> str:
        """Return the subscriber package version id for a package alias.

        Accepts a version id (returned unchanged), a package id (latest
        version of that package), ``name`` (latest version) or
        ``name@version`` (that exact version string).
        """
        req = parse_package_token(alias)
        if req.kind == AliasKind.VERSION_ID:
            return req.identifier

        versions = self._versions()
        if req.kind == AliasKind.PACKAGE_ID:
            candidates = [v for v in versions if v.package_id == req.identifier]
        else:
            candidates = [v for v in versions if v.package_name == req.identifier]

        if req.mode == ResolutionMode.EXACT:
            for ver in candidates:
                if ver.version == req.requested_version:
                    return ver.version_id
            raise ResolutionFailure("package", alias)

        latest = pick_latest(candidates, lambda v: v.version, self.version_ordering)
        if latest is None:
            raise ResolutionFailure("package", alias)
        logger.debug("Resolved package %s to %s (%s)", alias, latest.version_id, latest.version)
        return latest.version_id

    def get_package_version(self, version_id: str) -> PackageVersion:
        """Return the cached version-list entry for a version id."""
        for ver in self._versions():
            if ver.version_id == version_id:
                return ver
        raise ResolutionFailure("package version", version_id)


def _same_org_id(org_id: str, candidate: str) -> bool:
    """Compare org ids, accepting the 15-character form of an 18-character id."""
    if not org_id or not candidate:
        return False
    if org_id == candidate:
        return True
    return len(candidate) == 15 and org_id[:15] == candidate
