"""Argument parsing functionality for dxpm."""

import argparse

from version import __version__


def _add_common_options(parser):
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level (default: DXPM_LOG_LEVEL or INFO)",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="dxpm",
        description="dxpm - install packages and their dependencies into Salesforce orgs",
        add_help=True,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)
    parser.add_argument("--cli",
                        dest="CLI",
                        help="Name or path of the sfdx executable",
                        action="store",
                        type=str)
    parser.add_argument("--version-ordering",
                        dest="VERSION_ORDERING",
                        help="How the latest package version is chosen",
                        action="store",
                        choices=["numeric", "lexicographic"])

    subparsers = parser.add_subparsers(dest="action", metavar="{install,uninstall,org}")
    subparsers.required = True

    install = subparsers.add_parser(
        "install",
        help="Install package and dependencies into a target org",
        description=(
            "Installs packages and dependencies into a target org or scratch org. "
            "IDs or aliases can be used to target orgs and packages. Without --pkg, "
            "every dependency declared in sfdx-project.json is installed."
        ),
    )
    install.add_argument("-o", "--org",
                         dest="ORG",
                         help="Org Alias or ID to install package to",
                         required=True)
    install.add_argument("-p", "--pkg",
                         dest="PKG",
                         help="Package Alias or ID to install")
    install.add_argument("-c", "--create",
                         dest="CREATE",
                         help="Creates a new scratch org from file",
                         action="store_true")
    install.add_argument("-f", "--file",
                         dest="DEFINITION_FILE",
                         help="Scratch Org Definition File Path")
    install.add_argument("-s", "--save",
                         dest="SAVE",
                         help="Attempts to save package as a dependency to sfdx-project.json",
                         action="store_true")
    install.add_argument("-w", "--wait",
                         dest="WAIT",
                         help="Minutes to wait for each package install",
                         type=int)
    _add_common_options(install)

    uninstall = subparsers.add_parser(
        "uninstall",
        help="Uninstall a package from a target org",
        description=(
            "Uninstalls a package from a target org or scratch org and removes it "
            "from sfdx-project.json. Dependencies are left installed."
        ),
    )
    uninstall.add_argument("-o", "--org",
                           dest="ORG",
                           help="Org Alias or ID to uninstall package from",
                           required=True)
    uninstall.add_argument("-p", "--pkg",
                           dest="PKG",
                           help="Package Alias or ID to uninstall")
    _add_common_options(uninstall)

    org = subparsers.add_parser(
        "org",
        help="Retrieve information about your registered sfdx orgs",
        description="Retrieves information about the orgs registered with sfdx.",
    )
    org.add_argument("-d", "--dev",
                     dest="DEV_HUB",
                     help="Find default DevHub",
                     action="store_true")
    org.add_argument("-i", "--id",
                     dest="ORG_ID",
                     help="Find org by ID")
    _add_common_options(org)

    args = parser.parse_args(argv)

    if args.action == "org" and not args.DEV_HUB and not args.ORG_ID:
        org.error("At least one flag must be specified")
    if args.action == "install" and args.CREATE and not args.DEFINITION_FILE:
        install.error("--create requires --file")

    return args
