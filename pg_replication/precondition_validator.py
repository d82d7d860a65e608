#!/usr/bin/env python3
"""Precondition Validator module: decides whether a node may be configured at all."""

import os

from .configuration_manager import has_include_directive
from .errors import AlreadyConfigured, MissingPath, PreconditionError


class PreconditionValidator:
    """
    Gate run before any Step, identically in --dry-run and real runs.

    The include directive in postgresql.conf marks a node as configured; when
    it is present the gate fails closed and nothing is planned or executed.
    """

    def __init__(self, printer=None, has_include_directive=has_include_directive):
        self.printer = printer
        self.has_include_directive = has_include_directive

    def check(self, ctx):
        """
        Validate the node, stopping at the first failed check.

        Args:
            ctx: EnvironmentContext of the run

        Raises:
            MissingPath: If the data directory or postgresql.conf does not exist
            AlreadyConfigured: If postgresql.conf already includes the replication file
            PreconditionError: If postgresql.conf cannot be read
        """
        if not os.path.isdir(ctx.data_directory):
            raise MissingPath(ctx.data_directory, "PostgreSQL data directory")
        self._ok(f"Found PostgreSQL data directory at '{ctx.data_directory}'")

        if not os.path.isfile(ctx.config_file_path):
            raise MissingPath(ctx.config_file_path, "PostgreSQL configuration file")
        self._ok(f"Found PostgreSQL configuration file at '{ctx.config_file_path}'")

        try:
            configured = self.has_include_directive(ctx.config_file_path)
        except OSError as e:
            raise PreconditionError(
                f"Cannot read PostgreSQL configuration file '{ctx.config_file_path}': {e.strerror or e}"
            ) from e
        if configured:
            raise AlreadyConfigured(ctx.config_file_path)
        self._ok(f"'{ctx.config_file_path}' has not been configured for replication yet")

    def _ok(self, message):
        if self.printer:
            self.printer.print_success(message)
