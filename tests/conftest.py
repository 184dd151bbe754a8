"""Shared fixtures: a deterministic in-memory gateway and project files."""

import json
import re
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from constants import Constants
from errors import SubprocessFailure
from gateway.base import EnvironmentGateway
from gateway.models import InstalledPackage, Org, PackageVersion, QueryResult, ScratchOrg


def vid(n: int) -> str:
    """18-character subscriber package version id."""
    return f"04t{n:012d}AAA"


def pid(n: int) -> str:
    """18-character subscriber package id."""
    return f"033{n:012d}AAA"


_ID_RE = re.compile(r"Id='([^']+)'")


class FakeGateway(EnvironmentGateway):
    """In-memory gateway that records every call it receives.

    ``graph`` maps version id -> (package name, package id, [dependency ids]).
    Installing a version adds it to the org's installed set.
    """

    def __init__(
        self,
        orgs: Sequence[Org] = (),
        scratch_orgs: Sequence[ScratchOrg] = (),
        versions: Sequence[PackageVersion] = (),
        graph: Optional[Dict[str, Tuple[str, str, List[str]]]] = None,
        installed: Optional[Dict[str, List[str]]] = None,
        tool_present: bool = True,
    ):
        self.orgs = list(orgs)
        self.scratch_orgs = list(scratch_orgs)
        self.versions = list(versions)
        self.graph = dict(graph or {})
        self.installed = {k: list(v) for k, v in (installed or {}).items()}
        self.tool_present = tool_present
        self.calls: List[Tuple] = []
        self.fail_install: set = set()
        self.duplicate_records: set = set()

    def check_tool(self) -> None:
        if not self.tool_present:
            from errors import ToolNotFound
            raise ToolNotFound("sfdx")

    def list_orgs(self):
        self.calls.append(("list_orgs",))
        return list(self.orgs), list(self.scratch_orgs)

    def list_package_versions(self):
        self.calls.append(("list_package_versions",))
        return list(self.versions)

    def list_installed_packages(self, username):
        self.calls.append(("list_installed_packages", username))
        return [
            InstalledPackage(record_id="0A3", package_id="", package_name="", version_id=v)
            for v in self.installed.get(username, [])
        ]

    def query(self, username, soql, tooling=True):
        self.calls.append(("query", username, soql))
        ident = _ID_RE.search(soql).group(1)
        if "FROM SubscriberPackageVersion" in soql:
            if ident not in self.graph:
                return QueryResult(size=0, entity_type_name="SubscriberPackageVersion", records=[])
            _, package_id, deps = self.graph[ident]
            record = {
                "Id": ident,
                "SubscriberPackageId": package_id,
                "MajorVersion": 1,
                "MinorVersion": 0,
                "PatchVersion": 0,
                "BuildNumber": 1,
                "Package2ContainerOptions": "Managed",
                "Dependencies": {"ids": [{"subscriberPackageVersionId": d} for d in deps]} if deps else None,
            }
            records = [record, record] if ident in self.duplicate_records else [record]
            return QueryResult(size=len(records), entity_type_name="SubscriberPackageVersion", records=records)
        if "FROM SubscriberPackage" in soql:
            names = {p: n for (n, p, _) in self.graph.values()}
            if ident not in names:
                return QueryResult(size=0, entity_type_name="SubscriberPackage", records=[])
            return QueryResult(size=1, entity_type_name="SubscriberPackage", records=[{"Name": names[ident]}])
        raise AssertionError(f"unexpected query: {soql}")

    def install_package(self, username, version_id, wait):
        self.calls.append(("install_package", username, version_id, wait))
        if version_id in self.fail_install:
            raise SubprocessFailure(["sfdx", "force:package:install"], 1, "install failed")
        self.installed.setdefault(username, []).append(version_id)

    def uninstall_package(self, username, version_id):
        self.calls.append(("uninstall_package", username, version_id))
        if version_id in self.installed.get(username, []):
            self.installed[username].remove(version_id)

    def create_scratch_org(self, definition_file, alias):
        self.calls.append(("create_scratch_org", definition_file, alias))
        self.scratch_orgs.append(
            ScratchOrg(username=f"test-{alias}@example.com", org_id="00D000000000099AAA", alias=alias)
        )

    # helpers for assertions
    def installs(self) -> List[str]:
        return [c[2] for c in self.calls if c[0] == "install_package"]

    def count(self, name: str) -> int:
        return sum(1 for c in self.calls if c[0] == name)


USER = "admin@example.com"


@pytest.fixture
def orgs():
    return [
        Org(username=USER, org_id="00D000000000001AAA", alias="hub",
            is_dev_hub=True, default_marker="(D)"),
        Org(username="sandbox@example.com", org_id="00D000000000002AAA", alias="sandbox"),
    ]


@pytest.fixture
def scratch_orgs():
    return [
        ScratchOrg(username="scratch@example.com", org_id="00D000000000003AAA", alias="scratch",
                   status="Active", expiration_date="2026-12-01"),
        # Alias shared with a persistent org; persistent must win
        ScratchOrg(username="shadow@example.com", org_id="00D000000000004AAA", alias="sandbox"),
    ]


@pytest.fixture
def versions():
    return [
        PackageVersion(vid(1), "0Ho000000000001AAA", "A", "v1", "1.0"),
        PackageVersion(vid(2), "0Ho000000000001AAA", "A", "v2", "2.0"),
        PackageVersion(vid(3), "0Ho000000000002AAA", "B", "v1", "1.0"),
    ]


@pytest.fixture
def fake_gateway(orgs, scratch_orgs, versions):
    return FakeGateway(orgs=orgs, scratch_orgs=scratch_orgs, versions=versions)


MANIFEST = {
    "packageDirectories": [
        {
            "path": "force-app",
            "default": True,
            "package": "MyApp",
            "versionName": "ver 0.1",
            "versionNumber": "0.1.0.NEXT",
            "dependencies": [{"package": "Existing"}],
        },
        {"path": "other-app", "default": False},
    ],
    "namespace": "",
    "sfdcLoginUrl": "https://login.salesforce.com",
    "sourceApiVersion": "48.0",
    "packageAliases": {"Existing": "04t999999999999AAA", "MyApp": "0Ho999999999999AAA"},
}


@pytest.fixture
def project_file(tmp_path):
    path = tmp_path / "sfdx-project.json"
    path.write_text(json.dumps(MANIFEST, indent=2), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def restore_constants():
    """Undo configuration changes tests make to Constants."""
    saved = {k: v for k, v in vars(Constants).items() if k.isupper()}
    yield
    for k, v in saved.items():
        setattr(Constants, k, v)
