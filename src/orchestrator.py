"""Install and uninstall orchestration.

Ties org/package resolution, dependency walking, the installed-package check
and the manifest update together. Each dependency goes through the same
install path as the package that required it, so a failure part-way through
leaves earlier dependencies installed and recorded; re-running the command
picks up where it stopped.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Set, Tuple

from constants import Constants
from errors import InvalidArgument
from common.cache import TTLCache
from common.logging_utils import extra_context, is_debug_enabled, Timer
from gateway.base import EnvironmentGateway
from manifest import ManifestSynchronizer, find_project_file
from resolver import IdentityResolver
from walker import DependencyWalker

logger = logging.getLogger(__name__)


class Orchestrator:
    """Top-level install/uninstall operations against one project manifest."""

    def __init__(
        self,
        gateway: EnvironmentGateway,
        resolver: Optional[IdentityResolver] = None,
        walker: Optional[DependencyWalker] = None,
        project_file: Optional[Path] = None,
        install_wait: Optional[int] = None,
    ):
        self.gateway = gateway
        self.resolver = resolver or IdentityResolver(gateway)
        self.walker = walker or DependencyWalker(gateway)
        self.install_wait = install_wait if install_wait is not None else Constants.INSTALL_WAIT_MINUTES
        self._project_file = project_file
        self._manifest: Optional[ManifestSynchronizer] = None
        self._installed = TTLCache(Constants.CACHE_TTL_SEC)

    # ---------- preconditions ----------

    def check_preconditions(self) -> ManifestSynchronizer:
        """Verify the CLI is available and the project file can be found."""
        self.gateway.check_tool()
        if self._manifest is None:
            if self._project_file is None:
                logger.info("Locating SFDX Project File...")
                self._project_file = find_project_file()
                logger.info("Project File Found: %s", self._project_file)
            self._manifest = ManifestSynchronizer(self._project_file, self.walker, self.resolver)
        return self._manifest

    @property
    def manifest(self) -> ManifestSynchronizer:
        return self.check_preconditions()

    # ---------- installed-package state ----------

    def installed_versions(self, username: str) -> Set[str]:
        """Version ids installed in the org, cached until the next install/uninstall there."""
        cached = self._installed.get(username)
        if cached is not None:
            return cached
        versions = {p.version_id for p in self.gateway.list_installed_packages(username)}
        self._installed.set(username, versions)
        return versions

    def is_installed(self, username: str, version_id: str) -> bool:
        return version_id in self.installed_versions(username)

    def reset_caches(self) -> None:
        """Drop every cached lookup so the next call re-queries the gateway."""
        self.resolver.reset()
        self.walker.reset()
        self._installed.reset()

    # ---------- operations ----------

    def install(self, org: str, package: str) -> str:
        """Install package and its dependencies into org.

        Returns:
            The resolved package version id.
        """
        self.check_preconditions()
        username = self.resolver.resolve_environment(org)
        version_id = self.resolver.resolve_package_version(package)
        self._install(username, version_id, ())
        return version_id

    def _install(self, username: str, version_id: str, path: Tuple[str, ...]) -> None:
        self.walker.install_dependencies(username, version_id, self._install, path)

        if self.is_installed(username, version_id):
            logger.info("Package %s already installed in %s", version_id, username)
        else:
            logger.info("Installing package %s into %s", version_id, username)
            with Timer() as t:
                try:
                    self.gateway.install_package(username, version_id, self.install_wait)
                finally:
                    self._installed.invalidate(username)
            if is_debug_enabled(logger):
                logger.debug(
                    "Package installed",
                    extra=extra_context(
                        event="install",
                        component="orchestrator",
                        action="install_package",
                        outcome="success",
                        target=version_id,
                        duration_ms=t.duration_ms(),
                    ),
                )

        self.manifest.upsert(username, version_id)

    def uninstall(self, org: str, package: str) -> str:
        """Uninstall package from org and drop it from the manifest.

        Dependencies are left in place. The uninstall is attempted even when
        the package is not installed.

        Returns:
            The resolved package version id.
        """
        self.check_preconditions()
        username = self.resolver.resolve_environment(org)
        version_id = self.resolver.resolve_package_version(package)

        logger.info("Uninstalling package %s from %s", version_id, username)
        try:
            self.gateway.uninstall_package(username, version_id)
        finally:
            self._installed.invalidate(username)

        self.manifest.remove(version_id, username)
        return version_id

    def install_project(self, org: str) -> int:
        """Install every dependency declared in the project file, in order.

        Returns:
            Number of declared dependencies processed.
        """
        manifest = self.check_preconditions()
        declared = manifest.declared_dependencies()
        if not declared:
            logger.warning("No dependencies declared in %s", manifest.path.name)
            return 0
        for dep in declared:
            self.install(org, dep["versionId"] or dep["package"])
        return len(declared)

    def create_scratch_org(self, definition_file: str, alias: str) -> str:
        """Create a scratch org under alias and return its username."""
        self.gateway.check_tool()
        if not Path(definition_file).is_file():
            raise InvalidArgument(f"Scratch org definition file not found: {definition_file}")
        logger.info("Creating scratch org %s from %s", alias, definition_file)
        self.gateway.create_scratch_org(definition_file, alias)
        self.resolver.reset()
        return self.resolver.resolve_environment(alias)
