#!/usr/bin/env python3
"""Database Client module: role and database provisioning through psql."""

from .errors import QueryError
from .utilities import mask_secrets, quote_identifier, quote_literal, run_command


class DatabaseClient:
    """Runs SQL against the local PostgreSQL instance using the psql client"""

    def __init__(self, host, port, printer=None, run_command=run_command, environment=None):
        """
        Initialize DatabaseClient

        Args:
            host: PostgreSQL host (PGHOST)
            port: PostgreSQL port (PGPORT)
            printer: Printer instance for output
            run_command: Function used to run psql, injectable for tests
            environment: Complete environment for psql, None to inherit this process's
        """
        self.host = host
        self.port = port
        self.printer = printer
        self.run_command = run_command
        self.environment = environment

    @classmethod
    def from_context(cls, ctx, printer=None, run_command=run_command):
        return cls(
            ctx.host,
            ctx.port,
            printer=printer,
            run_command=run_command,
            environment=ctx.process_environment,
        )

    def _psql_command(self, sql):
        return [
            "psql",
            "-X",
            "-h",
            self.host,
            "-p",
            str(self.port),
            "-v",
            "ON_ERROR_STOP=1",
            "-t",
            "-A",
            "-c",
            sql,
        ]

    def execute(self, sql, secrets=()):
        """
        Execute a single SQL statement.

        Args:
            sql: Statement to run
            secrets: Values embedded in the statement that must never be printed

        Returns:
            str: Unaligned, tuples-only output of psql

        Raises:
            QueryError: If psql exits with a non-zero status
        """
        result = self.run_command(
            self._psql_command(sql), env=self.environment, printer=self.printer, secrets=secrets
        )
        if result.returncode != 0:
            # psql echoes the failing statement in its error context
            raise QueryError(
                mask_secrets(sql, secrets), result.returncode, mask_secrets(result.stderr or "", secrets)
            )
        return result.stdout

    def _exists(self, sql):
        return self.execute(sql).strip() == "1"

    def role_exists(self, name):
        """Check whether a database role with this exact name exists"""
        return self._exists(f"SELECT 1 FROM pg_roles WHERE rolname = {quote_literal(name)}")

    def database_exists(self, name):
        """Check whether a database with this exact name exists"""
        return self._exists(f"SELECT 1 FROM pg_database WHERE datname = {quote_literal(name)}")


def create_role_sql(name, password):
    return f"CREATE USER {quote_identifier(name)} WITH SUPERUSER PASSWORD {quote_literal(password)};"


def create_database_sql(name):
    return f"CREATE DATABASE {quote_identifier(name)};"


def permission_sql(user, database, search_path):
    """Statements that grant the coordinator user its database and schema search path"""
    return [
        f"GRANT ALL PRIVILEGES ON DATABASE {quote_identifier(database)} TO {quote_identifier(user)};",
        f"ALTER USER {quote_identifier(user)} SET search_path TO "
        f"{', '.join(quote_identifier(schema) for schema in search_path)};",
    ]
