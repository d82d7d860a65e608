#!/usr/bin/env python3
"""Print Manager module for PostgreSQL Replication Configuration Tool.

Every line goes to stdout as ``<timestamp> | <marker> <message>`` so the
output of a configuration run can be pasted into a support ticket as-is.
"""

from datetime import datetime

# Set by --debug
DEBUG_MODE = False

MARKER_WIDTH = 10


def _emit(marker, message):
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    print(f"{timestamp} | {marker.ljust(MARKER_WIDTH)}{message}")


class PrintManager:
    """Console output for the replication configuration workflow"""

    @staticmethod
    def print_header(message):
        """Print a banner line between two rulers"""
        ruler = "=" * 68
        print(f"\n{ruler}\n {message.upper()}\n{ruler}")

    @staticmethod
    def print_info(message):
        _emit("[INFO]", message)

    @staticmethod
    def print_highlight(message):
        """Print a note the operator should read before confirming"""
        _emit("[NOTE]", message)

    @staticmethod
    def print_success(message):
        _emit("[✓]", message)

    @staticmethod
    def print_warning(message):
        _emit("[⚠️]", message)

    @staticmethod
    def print_error(message):
        _emit("[✗]", message)

    @staticmethod
    def print_step(step_num, total_steps, message):
        """Print the progress marker of Step k of n"""
        _emit(f"[{step_num}/{total_steps}]", message)

    @staticmethod
    def print_dry_run(message):
        """Print planned content that --dry-run shows instead of applying"""
        _emit("[DRY-RUN]", message)

    @staticmethod
    def print_action(message):
        """Print a command line, only when --debug is set"""
        if DEBUG_MODE:
            _emit("[ACTION]", message)


# Shared instance used by the entry points
printer = PrintManager()
