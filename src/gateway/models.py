"""Data models for objects returned by the external CLI."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Org:
    """A non-scratch org registered with the CLI."""
    username: str
    org_id: str
    alias: str = ""
    is_dev_hub: bool = False
    default_marker: str = ""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Org":
        return cls(
            username=data.get("username") or data.get("UserName") or "",
            org_id=data.get("orgId") or data.get("OrgId") or "",
            alias=data.get("alias") or data.get("Alias") or "",
            is_dev_hub=bool(data.get("isDevHub", data.get("IsDevHub", False))),
            default_marker=data.get("defaultMarker") or data.get("DefaultMarker") or "",
        )


@dataclass(frozen=True)
class ScratchOrg:
    """A time-limited scratch org; carries expiry on top of the Org fields."""
    username: str
    org_id: str
    alias: str = ""
    dev_hub_org_id: str = ""
    status: str = ""
    is_expired: bool = False
    expiration_date: str = ""
    default_marker: str = ""
    is_dev_hub: bool = False

    @property
    def is_valid(self) -> bool:
        return not self.is_expired and self.status.lower() in ("", "active")

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ScratchOrg":
        return cls(
            username=data.get("username") or data.get("UserName") or "",
            org_id=data.get("orgId") or data.get("OrgId") or "",
            alias=data.get("alias") or data.get("Alias") or "",
            dev_hub_org_id=data.get("devHubOrgId") or data.get("DevHubOrgId") or "",
            status=data.get("status") or data.get("Status") or "",
            is_expired=bool(data.get("isExpired", data.get("IsExpired", False))),
            expiration_date=data.get("expirationDate") or data.get("ExpirationDate") or "",
            default_marker=data.get("defaultMarker") or data.get("DefaultMarker") or "",
        )


@dataclass(frozen=True)
class PackageVersion:
    """An entry from the dev hub's package version list."""
    version_id: str       # SubscriberPackageVersionId, 04t...
    package_id: str       # Package2Id, 0Ho...
    package_name: str     # Package2Name
    version_name: str = ""
    version: str = ""

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "PackageVersion":
        return cls(
            version_id=data.get("SubscriberPackageVersionId", ""),
            package_id=data.get("Package2Id", ""),
            package_name=data.get("Package2Name", ""),
            version_name=data.get("Name", ""),
            version=data.get("Version", ""),
        )


@dataclass(frozen=True)
class SubscriberPackageVersion:
    """A package version as seen from the target org, with its dependency ids."""
    version_id: str
    package_id: str
    package_name: str = ""
    major_version: int = 0
    minor_version: int = 0
    patch_version: int = 0
    build_number: int = 0
    container_type: str = ""
    dependency_ids: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def version_number(self) -> str:
        return "{}.{}.{}.{}".format(
            self.major_version, self.minor_version, self.patch_version, self.build_number
        )

    @classmethod
    def from_record(cls, record: Dict[str, Any], package_name: str = "") -> "SubscriberPackageVersion":
        deps = record.get("Dependencies") or {}
        ids = tuple(
            d.get("subscriberPackageVersionId", "")
            for d in (deps.get("ids") or [])
            if d.get("subscriberPackageVersionId")
        )
        return cls(
            version_id=record.get("Id", ""),
            package_id=record.get("SubscriberPackageId", ""),
            package_name=package_name or record.get("Name", ""),
            major_version=int(record.get("MajorVersion") or 0),
            minor_version=int(record.get("MinorVersion") or 0),
            patch_version=int(record.get("PatchVersion") or 0),
            build_number=int(record.get("BuildNumber") or 0),
            container_type=record.get("Package2ContainerOptions") or "",
            dependency_ids=ids,
        )


@dataclass(frozen=True)
class InstalledPackage:
    """An entry from an org's installed package list."""
    record_id: str
    package_id: str
    package_name: str
    version_id: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "InstalledPackage":
        return cls(
            record_id=data.get("Id", ""),
            package_id=data.get("SubscriberPackageId", ""),
            package_name=data.get("SubscriberPackageName", ""),
            version_id=data.get("SubscriberPackageVersionId", ""),
        )


@dataclass
class QueryResult:
    """Result body of a data query."""
    size: int
    entity_type_name: Optional[str]
    records: List[Dict[str, Any]]

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "QueryResult":
        records = data.get("records") or []
        return cls(
            size=int(data.get("size", data.get("totalSize", len(records)))),
            entity_type_name=data.get("entityTypeName"),
            records=list(records),
        )
