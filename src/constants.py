"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    USAGE_ERROR = 1
    PRECONDITION_ERROR = 2
    RESOLUTION_ERROR = 3
    SUBPROCESS_ERROR = 4
    MANIFEST_ERROR = 5
    INVARIANT_ERROR = 6


class VersionOrdering(Enum):
    """Strategies for picking the latest package version.

    Args:
        Enum (string): Ordering names accepted in configuration.
    """

    NUMERIC = "numeric"
    LEXICOGRAPHIC = "lexicographic"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    CLI_NAME = "sfdx"
    PROJECT_FILE_NAME = "sfdx-project.json"

    DEFAULT_MARKER = "(D)"
    PACKAGE_ID_PREFIX = "0Ho"
    VERSION_ID_PREFIX = "04t"
    ORG_ID_PREFIX = "00D"
    LATEST_TAG = "LATEST"

    # Minutes the CLI polls for an install request to finish
    INSTALL_WAIT_MINUTES = 100
    CACHE_TTL_SEC = 3600
    VERSION_ORDERING = VersionOrdering.NUMERIC.value

    MANIFEST_INDENT = 2
    LOG_FORMAT = "[%(levelname)s] %(message)s"

    CONFIG_SECTION = "dxpm"
    ENV_CONFIG_PATH = "DXPM_CONFIG"
    ENV_CLI = "DXPM_CLI"
    ENV_INSTALL_WAIT = "DXPM_INSTALL_WAIT"
    ENV_VERSION_ORDERING = "DXPM_VERSION_ORDERING"
    ENV_LOG_LEVEL = "DXPM_LOG_LEVEL"


def _default_config_paths():
    """Return candidate YAML config locations, most specific first."""
    paths = []
    env_path = os.environ.get(Constants.ENV_CONFIG_PATH)
    if env_path:
        paths.append(env_path)
    paths.append(os.path.join(os.getcwd(), "dxpm.yml"))
    paths.append(os.path.join(os.getcwd(), "dxpm.yaml"))
    xdg = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config")
    paths.append(os.path.join(xdg, "dxpm", "dxpm.yml"))
    return paths


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the first YAML config found.

    Args:
        path: Explicit config path; when given, default locations are not searched.

    Returns:
        The parsed document, or an empty dict when no file is found.
    """
    import yaml  # pylint: disable=import-outside-toplevel

    if path and not os.path.isfile(path):
        logger.warning("Config file not found: %s", path)
        return {}
    candidates = [path] if path else _default_config_paths()
    for candidate in candidates:
        if not candidate or not os.path.isfile(candidate):
            continue
        with open(candidate, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level is not a mapping", candidate)
            return {}
        logger.debug("Loaded config from %s", candidate)
        return data
    return {}


def apply_config(cfg: Dict[str, Any]) -> None:
    """Apply a parsed config document onto Constants.

    Only keys under the ``dxpm`` section are honored; unknown keys are ignored.
    """
    section = cfg.get(Constants.CONFIG_SECTION) if isinstance(cfg, dict) else None
    if not isinstance(section, dict):
        return
    if section.get("cli"):
        Constants.CLI_NAME = str(section["cli"])
    if section.get("install_wait") is not None:
        Constants.INSTALL_WAIT_MINUTES = int(section["install_wait"])
    if section.get("cache_ttl") is not None:
        Constants.CACHE_TTL_SEC = int(section["cache_ttl"])
    if section.get("version_ordering"):
        Constants.VERSION_ORDERING = VersionOrdering(str(section["version_ordering"]).lower()).value


def apply_env_overrides() -> None:
    """Apply DXPM_* environment variables onto Constants (above YAML, below CLI)."""
    cli = os.environ.get(Constants.ENV_CLI)
    if cli:
        Constants.CLI_NAME = cli
    wait = os.environ.get(Constants.ENV_INSTALL_WAIT)
    if wait:
        Constants.INSTALL_WAIT_MINUTES = int(wait)
    ordering = os.environ.get(Constants.ENV_VERSION_ORDERING)
    if ordering:
        Constants.VERSION_ORDERING = VersionOrdering(ordering.lower()).value
