"""Abstract boundary between dxpm and a live environment."""

from abc import ABC, abstractmethod
from typing import List, Tuple

from .models import InstalledPackage, Org, PackageVersion, QueryResult, ScratchOrg


class EnvironmentGateway(ABC):
    """Typed operations against the external CLI.

    Implementations must be deterministic enough to swap for a fake in tests;
    the resolver, walker and orchestrator only ever talk to this interface.
    """

    @abstractmethod
    def check_tool(self) -> None:
        """Raise ToolNotFound when the CLI cannot be executed."""

    @abstractmethod
    def list_orgs(self) -> Tuple[List[Org], List[ScratchOrg]]:
        """Return (non-scratch orgs, scratch orgs)."""

    @abstractmethod
    def list_package_versions(self) -> List[PackageVersion]:
        """Return every package version owned by the default dev hub."""

    @abstractmethod
    def list_installed_packages(self, username: str) -> List[InstalledPackage]:
        """Return the packages installed in the org for username."""

    @abstractmethod
    def query(self, username: str, soql: str, tooling: bool = True) -> QueryResult:
        """Run a data query against the org for username."""

    @abstractmethod
    def install_package(self, username: str, version_id: str, wait: int) -> None:
        """Install version_id into the org, waiting up to wait minutes."""

    @abstractmethod
    def uninstall_package(self, username: str, version_id: str) -> None:
        """Uninstall version_id from the org."""

    @abstractmethod
    def create_scratch_org(self, definition_file: str, alias: str) -> None:
        """Create a scratch org from definition_file under alias."""
