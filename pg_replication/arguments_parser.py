#!/usr/bin/env python3
"""Arguments Parser module for PostgreSQL Replication Configuration Tool."""

import argparse

from . import print_manager

DESCRIPTIONS = {
    "primary": "Configure this PostgreSQL service as the replication PRIMARY and register it with repmgr",
    "replica": "Configure this PostgreSQL service as a replication REPLICA cloned from the primary",
}


class ArgumentsParser:
    """Handles command-line argument parsing for the role configuration entry points"""

    @staticmethod
    def parse_arguments(role, argv=None):
        """
        Parse the flags shared by both entry points.

        Args:
            role: NodeRole of the entry point being run, selects the help text
            argv: Argument list, defaults to sys.argv[1:]

        Returns:
            argparse.Namespace: dry_run, config and debug
        """
        parser = argparse.ArgumentParser(description=DESCRIPTIONS[role.value])

        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show the changes that would be made without applying any of them",
        )
        parser.add_argument(
            "--config",
            type=str,
            required=False,
            default=None,
            help="Optional: YAML file overriding paths, service account and replication parameters",
        )
        parser.add_argument(
            "--debug",
            action="store_true",
            help="Enable debug output (shows command execution details)",
        )

        args = parser.parse_args(argv)

        # Set global debug mode
        print_manager.DEBUG_MODE = args.debug

        return args
