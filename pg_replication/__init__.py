#!/usr/bin/env python3
"""
PostgreSQL Replication Configuration Tool - Modular Components.

This package turns a freshly deployed PostgreSQL service into the PRIMARY or
the REPLICA of a two-node repmgr cluster, with a --dry-run mode that shows
exactly the same plan without changing anything.

Modules:
- print_manager: Handles all output formatting and printing
- errors: Exception hierarchy for every failure the tool reports
- models: NodeRole, ExecutionMode and registration value types
- settings: Defaults and YAML overrides for paths and tuning parameters
- environment: Validates environment variables and executables, resolves paths
- precondition_validator: Refuses to configure a missing or already configured node
- configuration_manager: Renders and writes configuration files
- backup_manager: Backs up postgresql.conf before it is edited
- database_client: Role and database provisioning through psql
- registration_client: repmgr primary register / standby clone
- idempotency_guard: Per-resource "already applied?" checks
- step_planner: Builds the ordered Step list for a role
- step_executor: Walks Steps in --dry-run or real mode
- orchestrator: High-level workflow orchestration and completion handling
- arguments_parser: Command-line argument parsing
- cli: Entry points for the primary and replica workflows
"""

from .arguments_parser import ArgumentsParser
from .backup_manager import BackupManager
from .database_client import DatabaseClient
from .environment import EnvironmentContext, load_environment, mask_secret
from .errors import (
    AlreadyConfigured,
    CloneError,
    MissingExecutable,
    MissingPath,
    MissingVariable,
    PreconditionError,
    QueryError,
    RegistrationError,
    ReplicationSetupError,
    SettingsError,
    StepApplyError,
)
from .models import ExecutionMode, NodeRole, PrimaryEndpoint, RegistrationConfig
from .orchestrator import (
    ReplicationOrchestrator,
    handle_configuration_failure,
    handle_successful_completion,
)
from .precondition_validator import PreconditionValidator
from .print_manager import PrintManager, printer, DEBUG_MODE
from .registration_client import ClusterRegistrationClient
from .settings import Settings, load_settings
from .step_executor import DualModeExecutor, ExecutionReport
from .step_planner import Step, StepPlanner, registration_config_for
from .utilities import format_runtime, run_command

__all__ = [
    "ArgumentsParser",
    "BackupManager",
    "DatabaseClient",
    "EnvironmentContext",
    "load_environment",
    "mask_secret",
    "AlreadyConfigured",
    "CloneError",
    "MissingExecutable",
    "MissingPath",
    "MissingVariable",
    "PreconditionError",
    "QueryError",
    "RegistrationError",
    "ReplicationSetupError",
    "SettingsError",
    "StepApplyError",
    "ExecutionMode",
    "NodeRole",
    "PrimaryEndpoint",
    "RegistrationConfig",
    "ReplicationOrchestrator",
    "handle_configuration_failure",
    "handle_successful_completion",
    "PreconditionValidator",
    "PrintManager",
    "printer",
    "DEBUG_MODE",
    "ClusterRegistrationClient",
    "Settings",
    "load_settings",
    "DualModeExecutor",
    "ExecutionReport",
    "Step",
    "StepPlanner",
    "registration_config_for",
    "format_runtime",
    "run_command",
]
