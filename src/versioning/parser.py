"""Token parsing and ordering utilities for package aliases."""

from typing import Iterable, Optional, Tuple, TypeVar

from packaging import version as pkg_version

from constants import Constants, VersionOrdering
from .models import AliasKind, PackageRequest, ResolutionMode

T = TypeVar("T")


def tokenize_rightmost_at(s: str) -> Tuple[str, Optional[str]]:
    """Return (identifier, version or None) using the rightmost-'@' rule."""
    s = s.strip()
    if '@' not in s:
        return s, None
    identifier, version_part = s.rsplit('@', 1)
    version_part = version_part.strip()
    return identifier.strip(), version_part if version_part else None


def parse_package_token(token: str) -> PackageRequest:
    """Parse a CLI package token into a PackageRequest.

    A version id (``04t``) is taken as is. Package ids (``0Ho``) and names may
    carry an ``@version`` suffix, where ``LATEST`` (any case) means no version
    constraint.
    """
    stripped = token.strip()
    if stripped.startswith(Constants.VERSION_ID_PREFIX):
        return PackageRequest(AliasKind.VERSION_ID, stripped, None, ResolutionMode.EXACT, token)

    identifier, version = tokenize_rightmost_at(stripped)
    if identifier.startswith(Constants.PACKAGE_ID_PREFIX):
        kind = AliasKind.PACKAGE_ID
    else:
        kind = AliasKind.NAME
    if version is None or version.upper() == Constants.LATEST_TAG:
        return PackageRequest(kind, identifier, None, ResolutionMode.LATEST, token)
    return PackageRequest(kind, identifier, version, ResolutionMode.EXACT, token)


def numeric_version_key(version: str) -> Tuple[int, object]:
    """Sort key comparing dotted versions numerically.

    ``10.0`` outranks ``9.0`` and ``1.0.0.1`` outranks ``1.0.0``. Strings that
    are not valid versions rank below every valid one and compare as text.
    """
    try:
        return (1, pkg_version.Version(version or ""))
    except pkg_version.InvalidVersion:
        return (0, version or "")


def pick_latest(items: Iterable[T], version_of, ordering: Optional[str] = None) -> Optional[T]:
    """Return the item whose version is greatest, or None when items is empty.

    Args:
        items: Candidates.
        version_of: Callable returning an item's version string.
        ordering: ``numeric`` or ``lexicographic``; defaults to Constants.VERSION_ORDERING.

    Ties keep the first candidate seen.
    """
    mode = VersionOrdering(ordering or Constants.VERSION_ORDERING)
    if mode == VersionOrdering.LEXICOGRAPHIC:
        key = version_of
    else:
        def key(item):
            return numeric_version_key(version_of(item))

    best = None
    best_key = None
    for item in items:
        k = key(item)
        if best is None or k > best_key:
            best, best_key = item, k
    return best
