"""
CLI argument parser.

This module contains the argument parser setup for the tessera CLI.
"""

import argparse

from tessera.auth.config.loader import DEFAULT_CONFIG_FILE

from .commands import handle_config_validate_command, handle_secret_generate_command

TESSERA_VERSION = "0.1.0"


def create_parser():
    """Create and configure the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="tessera",
        description="Command-line interface for the tessera authentication engine.",
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {TESSERA_VERSION}"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )

    # Subparsers for subcommands
    subparsers = parser.add_subparsers(
        title="commands", dest="command", required=False, help="Command to execute"
    )

    # Config commands
    config_parser = subparsers.add_parser("config", help="Configuration commands")
    config_subparsers = config_parser.add_subparsers(
        title="config commands",
        dest="config_command",
        help="Configuration operations",
    )

    config_validate_parser = config_subparsers.add_parser(
        "validate", help="Validate an auth configuration file"
    )
    config_validate_parser.add_argument(
        "file",
        nargs="?",
        default=None,
        help=f"Configuration file to validate. Default: ./{DEFAULT_CONFIG_FILE}",
    )
    config_validate_parser.set_defaults(func=handle_config_validate_command)

    # Secret commands
    secret_parser = subparsers.add_parser("secret", help="Signing secret commands")
    secret_subparsers = secret_parser.add_subparsers(
        title="secret commands",
        dest="secret_command",
        help="Secret operations",
    )

    secret_generate_parser = secret_subparsers.add_parser(
        "generate", help="Generate a random token signing key"
    )
    secret_generate_parser.add_argument(
        "--length",
        type=int,
        default=48,
        help="Number of random bytes. Default: 48",
    )
    secret_generate_parser.set_defaults(func=handle_secret_generate_command)

    return parser
