"""Data models for package alias parsing."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ResolutionMode(Enum):
    """Resolution strategy derived from the requested version."""
    EXACT = "exact"
    LATEST = "latest"


class AliasKind(Enum):
    """What a user-supplied package token refers to."""
    VERSION_ID = "version_id"
    PACKAGE_ID = "package_id"
    NAME = "name"


@dataclass
class PackageRequest:
    """Parsed package alias."""
    kind: AliasKind
    identifier: str  # version id, package id, or package name
    requested_version: Optional[str]
    mode: ResolutionMode
    raw_token: str
