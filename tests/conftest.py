#!/usr/bin/env python3
"""
Shared pytest configuration and fixtures for all tests.
"""

import hashlib
import os
import subprocess
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict
from unittest.mock import Mock, patch

import pytest

# Add the parent directory to Python path so we can import pg_replication
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from pg_replication import print_manager  # noqa: E402
from pg_replication.environment import load_environment  # noqa: E402
from pg_replication.errors import QueryError  # noqa: E402
from pg_replication.models import NodeRole  # noqa: E402
from pg_replication.registration_client import ClusterRegistrationClient  # noqa: E402
from pg_replication.settings import Settings  # noqa: E402
from pg_replication.step_planner import StepPlanner  # noqa: E402

ORIGINAL_POSTGRESQL_CONF = """# PostgreSQL configuration file
listen_addresses = '*'
max_connections = 100
shared_buffers = 128MB
"""

FIXED_NOW = datetime(2024, 5, 17, 9, 30, 0)

PRIMARY_PASSWORD = "s3cret-primary-pw"
REPLICA_PASSWORD = "s3cret-replica-pw"


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_debug_mode():
    """Keep --debug from leaking between tests"""
    yield
    print_manager.DEBUG_MODE = False


@pytest.fixture(autouse=True)
def no_chown():
    """Tests do not run with a postgres account; record chown calls instead"""
    with patch("pg_replication.configuration_manager.shutil.chown") as mock_chown:
        yield mock_chown


@pytest.fixture
def common_environ() -> Dict[str, str]:
    """Variables every Railway PostgreSQL service exposes"""
    return {
        "RAILWAY_PROJECT_NAME": "replication-demo",
        "RAILWAY_SERVICE_NAME": "Postgres",
        "RAILWAY_ENVIRONMENT": "production",
        "RAILWAY_PROJECT_ID": "0f1e2d3c-project",
        "RAILWAY_SERVICE_ID": "4b5a6978-service",
        "RAILWAY_ENVIRONMENT_ID": "8c7d6e5f-env",
        "PGHOST": "postgres.railway.internal",
        "PGPORT": "5432",
        "PATH": "/usr/bin:/bin",
    }


@pytest.fixture
def primary_environ(common_environ) -> Dict[str, str]:
    return {**common_environ, "REPMGR_USER_PASSWORD": PRIMARY_PASSWORD}


@pytest.fixture
def replica_environ(common_environ) -> Dict[str, str]:
    return {
        **common_environ,
        "PGHOST": "postgres-replica.railway.internal",
        "PRIMARY_PGHOST": "postgres.railway.internal",
        "PRIMARY_PGPORT": "5432",
        "PRIMARY_REPMGR_USER_PASSWORD": REPLICA_PASSWORD,
    }


@pytest.fixture
def fake_which():
    """PATH lookup that finds every command under /usr/bin"""
    return Mock(side_effect=lambda command: f"/usr/bin/{command}")


@pytest.fixture
def volume(tmp_path) -> Path:
    """Mounted volume with a fresh, unconfigured data directory"""
    volume_path = tmp_path / "volume"
    pgdata = volume_path / "pgdata"
    pgdata.mkdir(parents=True)
    (pgdata / "postgresql.conf").write_text(ORIGINAL_POSTGRESQL_CONF)
    return volume_path


@pytest.fixture
def settings(volume) -> Settings:
    return Settings(volume_mount_path=str(volume))


@pytest.fixture
def primary_context(primary_environ, settings, fake_which):
    return load_environment(NodeRole.PRIMARY, primary_environ, settings, which=fake_which)


@pytest.fixture
def replica_context(replica_environ, settings, fake_which):
    return load_environment(NodeRole.REPLICA, replica_environ, settings, which=fake_which)


# =============================================================================
# Collaborator Fixtures
# =============================================================================


@pytest.fixture
def mock_printer() -> Mock:
    """Mock printer for testing output operations.

    Returns:
        Mock: Mock printer instance with all required methods.
    """
    printer = Mock()
    printer.print_header = Mock()
    printer.print_info = Mock()
    printer.print_highlight = Mock()
    printer.print_action = Mock()
    printer.print_success = Mock()
    printer.print_error = Mock()
    printer.print_warning = Mock()
    printer.print_step = Mock()
    printer.print_dry_run = Mock()
    return printer


class FakeDatabaseClient:
    """In-memory stand-in for DatabaseClient that records every statement"""

    def __init__(self, roles=(), databases=(), fail_on=None):
        self.roles = set(roles)
        self.databases = set(databases)
        self.fail_on = fail_on
        self.executed = []
        self.queries = []
        self.secrets = {}

    def execute(self, sql, secrets=()):
        if self.fail_on and self.fail_on in sql:
            raise QueryError(sql, 1, "ERROR:  permission denied")
        self.executed.append(sql)
        if secrets:
            self.secrets[sql] = tuple(secrets)
        if sql.startswith("CREATE USER "):
            self.roles.add(sql.split()[2])
        elif sql.startswith("CREATE DATABASE "):
            self.databases.add(sql.split()[2].rstrip(";"))
        return ""

    def role_exists(self, name):
        self.queries.append(("role", name))
        return name in self.roles

    def database_exists(self, name):
        self.queries.append(("database", name))
        return name in self.databases


@pytest.fixture
def fake_database():
    return FakeDatabaseClient()


@pytest.fixture
def mock_run_as_user() -> Mock:
    """Successful `su -m <user> -c ...` runner"""
    return Mock(return_value=subprocess.CompletedProcess(["su"], 0, stdout="", stderr=""))


@pytest.fixture
def planner_factory(fake_database, mock_run_as_user):
    """Build StepPlanners wired to the fake database and the mock su runner"""

    def _factory(printer=None, database=None, run_as_user=None):
        database = database or fake_database
        run_as_user = run_as_user or mock_run_as_user
        return StepPlanner(
            printer=printer,
            database_client_factory=lambda ctx, printer=None: database,
            registration_client_factory=lambda ctx, printer=None: ClusterRegistrationClient.from_context(
                ctx, printer=printer, run_as_user=run_as_user
            ),
            clock=lambda: FIXED_NOW,
        )

    return _factory


# =============================================================================
# Filesystem Helpers
# =============================================================================


def snapshot_tree(root) -> Dict[str, Any]:
    """Map every path under root to a content hash (files) or None (directories)"""
    snapshot = {}
    for dirpath, dirnames, filenames in os.walk(root):
        for dirname in dirnames:
            path = os.path.join(dirpath, dirname)
            snapshot[os.path.relpath(path, root)] = None
        for filename in filenames:
            path = os.path.join(dirpath, filename)
            with open(path, "rb") as f:
                digest = hashlib.sha256(f.read()).hexdigest()
            snapshot[os.path.relpath(path, root)] = (digest, os.stat(path).st_mode)
    return snapshot


@pytest.fixture
def tree_snapshot():
    """Snapshot helper for asserting a directory tree did not change"""
    return snapshot_tree


@pytest.fixture
def database_factory():
    """Build FakeDatabaseClient instances with pre-existing roles or databases"""
    return FakeDatabaseClient
