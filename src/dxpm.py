"""dxpm - Salesforce package installer with dependency resolution

    Returns:
        int: Exit code
"""
import logging
import sys

from args import parse_args
from cli_config import load_configuration
from common.logging_utils import add_file_handler, configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes
from errors import DxpmError
from gateway.sfdx import SfdxGateway
from orchestrator import Orchestrator

logger = logging.getLogger(__name__)


def setup_logging(args):
    """Configure logging from CLI flags; --loglevel wins over DXPM_LOG_LEVEL."""
    configure_logging(getattr(args, "LOG_LEVEL", None))
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        add_file_handler(log_file)


def build_orchestrator(args):
    """Create the orchestrator wired to the sfdx gateway."""
    gateway = SfdxGateway(Constants.CLI_NAME)
    return Orchestrator(gateway, install_wait=Constants.INSTALL_WAIT_MINUTES)


def run_install(args, orchestrator):
    """Handle `dxpm install`."""
    org = args.ORG
    if args.CREATE:
        orchestrator.create_scratch_org(args.DEFINITION_FILE, org)
    if args.PKG:
        version_id = orchestrator.install(org, args.PKG)
        logger.info("Package %s installed into %s", version_id, org)
        return ExitCodes.SUCCESS.value
    count = orchestrator.install_project(org)
    logger.info("Installed %d project dependencies into %s", count, org)
    return ExitCodes.SUCCESS.value


def run_uninstall(args, orchestrator):
    """Handle `dxpm uninstall`."""
    if not args.PKG:
        logger.error("A package is required: dxpm uninstall -o <org> -p <package>")
        return ExitCodes.USAGE_ERROR.value
    version_id = orchestrator.uninstall(args.ORG, args.PKG)
    logger.info("Package %s uninstalled from %s", version_id, args.ORG)
    return ExitCodes.SUCCESS.value


def run_org(args, orchestrator):
    """Handle `dxpm org`."""
    orchestrator.gateway.check_tool()
    resolver = orchestrator.resolver
    if args.DEV_HUB:
        dev = resolver.dev_hub()
        print(f"Org ID:   {dev.org_id}")
        print(f"UserName: {dev.username}")
    if args.ORG_ID:
        org = resolver.find_org_by_id(args.ORG_ID)
        print(f"Org ID:   {org.org_id}")
        print(f"UserName: {org.username}")
        if org.alias:
            print(f"Alias:    {org.alias}")
        expiration = getattr(org, "expiration_date", "")
        if expiration:
            print(f"Expires:  {expiration}")
    return ExitCodes.SUCCESS.value


COMMANDS = {
    "install": run_install,
    "uninstall": run_uninstall,
    "org": run_org,
}


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    setup_logging(args)
    load_configuration(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.action)
        )

    if args.action == "install" and args.SAVE:
        logger.debug("--save given; installed packages are always recorded in %s",
                     Constants.PROJECT_FILE_NAME)

    orchestrator = build_orchestrator(args)
    try:
        code = COMMANDS[args.action](args, orchestrator)
    except DxpmError as exc:
        logger.error("%s", exc)
        sys.exit(exc.exit_code.value)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(event="function_exit", component="cli", action=args.action,
                                outcome="success" if code == 0 else "failure")
        )
    sys.exit(code)


if __name__ == "__main__":
    main()
