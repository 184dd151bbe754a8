"""Runtime configuration layering for the CLI.

Precedence, lowest to highest: built-in Constants, YAML config file, DXPM_*
environment variables, command-line flags.
"""

from __future__ import annotations

import logging

import yaml

from constants import Constants, VersionOrdering, _load_yaml_config, apply_config, apply_env_overrides

logger = logging.getLogger(__name__)


def load_configuration(args) -> None:
    """Apply config file, environment and CLI overrides onto Constants.

    Invalid values in the config file or environment are reported and the
    previous value is kept; invalid CLI values are rejected by argparse.
    """
    config_path = getattr(args, "CONFIG", None)
    try:
        apply_config(_load_yaml_config(config_path))
    except (OSError, yaml.YAMLError, ValueError, TypeError) as exc:
        logger.warning("Ignoring configuration file: %s", exc)

    try:
        apply_env_overrides()
    except ValueError as exc:
        logger.warning("Ignoring DXPM_* environment override: %s", exc)

    apply_cli_overrides(args)


def apply_cli_overrides(args) -> None:
    """Apply CLI overrides for tunables (CLI has highest precedence)."""
    if getattr(args, "CLI", None):
        Constants.CLI_NAME = args.CLI
    if getattr(args, "VERSION_ORDERING", None):
        Constants.VERSION_ORDERING = VersionOrdering(args.VERSION_ORDERING).value
    if getattr(args, "WAIT", None) is not None:
        Constants.INSTALL_WAIT_MINUTES = int(args.WAIT)
