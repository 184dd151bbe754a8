"""Project manifest (sfdx-project.json) discovery and synchronization.

Only ``packageDirectories[0].dependencies`` and ``packageAliases`` are ever
changed; every other field is written back as it was read.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from constants import Constants
from errors import ManifestIOFailure, ProjectNotFound, ResolutionFailure, SubprocessFailure
from common.logging_utils import extra_context, is_debug_enabled
from validation import MANIFEST_SCHEMA, SchemaError, validate

logger = logging.getLogger(__name__)


def find_project_file(start: Optional[os.PathLike] = None, marker: Optional[str] = None) -> Path:
    """Walk from start (default: cwd) towards the root looking for the marker file.

    Raises:
        ProjectNotFound: No directory up to the filesystem root holds the marker.
    """
    marker = marker or Constants.PROJECT_FILE_NAME
    current = Path(start) if start is not None else Path.cwd()
    current = current.resolve()
    for directory in [current, *current.parents]:
        candidate = directory / marker
        if candidate.is_file():
            return candidate
    raise ProjectNotFound(str(current), marker)


def load_manifest(path: Path) -> Dict[str, Any]:
    """Read and validate the manifest at path."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ManifestIOFailure(
            str(path), f"invalid JSON (line {exc.lineno}, column {exc.colno}): {exc.msg}"
        ) from exc
    except OSError as exc:
        raise ManifestIOFailure(str(path), f"read failed: {exc}") from exc
    try:
        validate(MANIFEST_SCHEMA, data, label="project file")
    except SchemaError as exc:
        raise ManifestIOFailure(str(path), str(exc)) from exc
    return data


def write_manifest(path: Path, data: Dict[str, Any]) -> None:
    """Replace the manifest with data, via a temp file in the same directory."""
    text = json.dumps(data, indent=Constants.MANIFEST_INDENT, ensure_ascii=False) + "\n"
    fd, tmp = tempfile.mkstemp(prefix=".dxpm-", suffix=".json", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
        if path.exists():
            os.chmod(tmp, path.stat().st_mode & 0o777)
        os.replace(tmp, path)
    except OSError as exc:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise ManifestIOFailure(str(path), f"write failed: {exc}") from exc


def _dependencies(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    directory = data["packageDirectories"][0]
    deps = directory.get("dependencies")
    if deps is None:
        deps = []
        directory["dependencies"] = deps
    return deps


def _aliases(data: Dict[str, Any]) -> Dict[str, str]:
    aliases = data.get("packageAliases")
    if aliases is None:
        aliases = {}
        data["packageAliases"] = aliases
    return aliases


class ManifestSynchronizer:
    """Keeps the manifest's dependency list and alias table in step with installs.

    Args:
        path: Manifest file location.
        walker: Used to look up the package name of an installed version.
        resolver: Used to look up the package name of a version being removed.
    """

    def __init__(self, path: Path, walker, resolver):
        self.path = Path(path)
        self.walker = walker
        self.resolver = resolver

    def load(self) -> Dict[str, Any]:
        return load_manifest(self.path)

    def declared_dependencies(self) -> List[Dict[str, str]]:
        """Return the first package directory's dependencies with alias ids.

        Each item is ``{"package": name, "versionId": id-or-None}``.
        """
        data = self.load()
        aliases = data.get("packageAliases") or {}
        return [
            {"package": dep["package"], "versionId": aliases.get(dep["package"])}
            for dep in data["packageDirectories"][0].get("dependencies") or []
        ]

    def upsert(self, username: str, version_id: str) -> None:
        """Record version_id as a dependency and set its alias mapping."""
        data = self.load()
        version = self.walker.get_version(username, version_id)
        name = version.package_name

        deps = _dependencies(data)
        if not any(dep.get("package") == name for dep in deps):
            deps.append({"package": name})
            logger.info("Added dependency %s to %s", name, self.path.name)

        _aliases(data)[name] = version_id
        write_manifest(self.path, data)
        if is_debug_enabled(logger):
            logger.debug(
                "Manifest upsert",
                extra=extra_context(
                    event="manifest_write",
                    component="manifest",
                    action="upsert",
                    target=name,
                    version_id=version_id,
                ),
            )

    def remove(self, version_id: str, username: Optional[str] = None) -> None:
        """Drop the dependency entry and alias mapping for version_id.

        The package name is taken from the alias table first, then from the
        target org (when username is given), then from the dev hub version
        list. Nothing is written when no entry matches.
        """
        data = self.load()
        aliases = _aliases(data)
        name = self._name_for(version_id, aliases, username)
        if name is None:
            logger.info("No dependency recorded for %s; project file unchanged", version_id)
            return

        directory = data["packageDirectories"][0]
        deps = directory.get("dependencies") or []
        kept = [dep for dep in deps if dep.get("package") != name]
        if len(kept) == len(deps) and name not in aliases:
            logger.info("Dependency %s not present in %s", name, self.path.name)
            return

        if "dependencies" in directory:
            directory["dependencies"] = kept
        aliases.pop(name, None)
        write_manifest(self.path, data)
        logger.info("Removed dependency %s from %s", name, self.path.name)

    def _name_for(
        self, version_id: str, aliases: Dict[str, str], username: Optional[str]
    ) -> Optional[str]:
        for name, alias_id in aliases.items():
            if alias_id == version_id:
                return name

        if username:
            try:
                return self.walker.get_version(username, version_id).package_name
            except ResolutionFailure:
                pass
            except SubprocessFailure as exc:
                logger.warning("Could not look up %s in %s: %s", version_id, username, exc)
        try:
            return self.resolver.get_package_version(version_id).package_name
        except ResolutionFailure:
            return None
        except SubprocessFailure as exc:
            logger.warning("Could not look up %s in the dev hub: %s", version_id, exc)
            return None
