#!/usr/bin/env python3
"""Step Planner module: builds the ordered Step list for a node role.

The same Step objects are consumed by the executor in --dry-run and in real
runs, so what is shown and what is done cannot drift apart. Ordering matters:

* the tuning file is written before postgresql.conf includes it;
* postgresql.conf is backed up before it is appended to;
* registration with repmgr runs last, once everything it reads is on disk.
"""

import shlex
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Tuple

from .backup_manager import BackupManager
from .configuration_manager import (
    append_include_directive,
    ensure_directory,
    render_include_block,
    render_registration_config,
    render_replication_config,
    write_config_file,
)
from .database_client import DatabaseClient, create_database_sql, create_role_sql, permission_sql
from .idempotency_guard import database_exists, directory_exists, never_applied, role_exists
from .models import NODE_IDENTITIES, NodeRole, RegistrationConfig
from .registration_client import ClusterRegistrationClient

REGISTRATION_CONFIG_MODE = 0o600


@dataclass(frozen=True)
class Step:
    """
    One unit of configuration work.

    Attributes:
        description: One-line summary shown in both modes
        apply: Performs the mutation, raises on failure
        is_applied: Side-effect-free check, True when apply() would be a no-op
        details: Planned content (file lines, SQL, commands) shown in --dry-run
    """

    description: str
    apply: Callable[[], None]
    is_applied: Callable[[], bool] = never_applied
    details: Tuple[str, ...] = ()


def registration_config_for(role: NodeRole, ctx: Any) -> RegistrationConfig:
    """Build the repmgr registration settings for a role"""
    node_id, node_name = NODE_IDENTITIES[role]
    settings = ctx.settings
    connection_info = (
        f"host={ctx.host} port={ctx.port} user={settings.repmgr_user} "
        f"dbname={settings.repmgr_database} connect_timeout={settings.connect_timeout}"
    )
    return RegistrationConfig(
        node_id=node_id,
        node_name=node_name,
        connection_info=connection_info,
        data_directory=ctx.data_directory,
    )


def _content_lines(content: str) -> Tuple[str, ...]:
    return tuple(f"  {line}" if line else "" for line in content.splitlines())


def _su_display(account: str, command: List[str]) -> str:
    return f'su -m {account} -c "{shlex.join(command)}"'


class StepPlanner:
    """Produces the deterministic Step sequence for PRIMARY or REPLICA"""

    def __init__(
        self,
        printer: Any = None,
        database_client_factory: Callable[..., Any] = DatabaseClient.from_context,
        registration_client_factory: Callable[..., Any] = ClusterRegistrationClient.from_context,
        backup_manager: Any = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """
        Initialize the planner.

        Args:
            printer: PrintManager instance passed on to the collaborators
            database_client_factory: Builds a DatabaseClient from an EnvironmentContext
            registration_client_factory: Builds a ClusterRegistrationClient from an EnvironmentContext
            backup_manager: BackupManager instance, created on demand if None
            clock: Source of the timestamp written next to the include directive
        """
        self.printer = printer
        self.database_client_factory = database_client_factory
        self.registration_client_factory = registration_client_factory
        self.backup_manager = backup_manager or BackupManager(printer=printer)
        self.clock = clock

    def plan(self, role: NodeRole, ctx: Any) -> List[Step]:
        """
        Build the Step list for a role.

        Planning never touches the filesystem, the database or repmgr; all
        work is deferred to the Steps' apply/is_applied callables.

        Args:
            role: Role the node is being configured for
            ctx: EnvironmentContext of the run

        Returns:
            List[Step]: Steps in the order they must run
        """
        if role is NodeRole.PRIMARY:
            return self._plan_primary(ctx)
        return self._plan_replica(ctx)

    # ------------------------------------------------------------------
    # Role workflows
    # ------------------------------------------------------------------

    def _plan_primary(self, ctx: Any) -> List[Step]:
        database = self.database_client_factory(ctx, printer=self.printer)
        registration = self.registration_client_factory(ctx, printer=self.printer)
        config = registration_config_for(NodeRole.PRIMARY, ctx)

        return [
            self._replication_config_step(ctx),
            self._backup_step(ctx),
            self._include_directive_step(ctx),
            *self._coordinator_database_steps(ctx, database),
            self._registration_directory_step(ctx),
            self._registration_config_step(ctx, config),
            self._register_primary_step(ctx, registration, config),
        ]

    def _plan_replica(self, ctx: Any) -> List[Step]:
        registration = self.registration_client_factory(ctx, printer=self.printer)
        config = registration_config_for(NodeRole.REPLICA, ctx)

        return [
            self._registration_directory_step(ctx),
            self._registration_config_step(ctx, config),
            self._clone_step(ctx, registration, config),
        ]

    # ------------------------------------------------------------------
    # postgresql.conf
    # ------------------------------------------------------------------

    def _replication_config_step(self, ctx: Any) -> Step:
        path = ctx.replication_config_path
        content = render_replication_config(ctx.settings.replication_parameters)
        return Step(
            description=f"Create replication configuration file '{path}'",
            apply=lambda: write_config_file(path, content, printer=self.printer),
            details=(f"create file '{path}' with content:", "", *_content_lines(content)),
        )

    def _backup_step(self, ctx: Any) -> Step:
        source, target = ctx.config_file_path, ctx.backup_config_path
        return Step(
            description=f"Back up '{source}' to '{target}'",
            apply=lambda: self.backup_manager.backup_configuration(source, target),
            details=(f"copy '{source}' to '{target}'",),
        )

    def _include_directive_step(self, ctx: Any) -> Step:
        path = ctx.config_file_path
        block = render_include_block(self.clock())
        # Guarded by the precondition gate, not by is_applied
        return Step(
            description=f"Append include directive to '{path}'",
            apply=lambda: append_include_directive(path, block, printer=self.printer),
            details=(f"append to '{path}' these lines:", *_content_lines(block)),
        )

    # ------------------------------------------------------------------
    # repmgr database user and database
    # ------------------------------------------------------------------

    def _coordinator_database_steps(self, ctx: Any, database: Any) -> List[Step]:
        settings = ctx.settings
        user, dbname = settings.repmgr_user, settings.repmgr_database
        grants = permission_sql(user, dbname, settings.search_path)
        masked_create_role = create_role_sql(user, ctx.masked_coordinator_password)

        def create_role():
            database.execute(create_role_sql(user, ctx.coordinator_password), secrets=(ctx.coordinator_password,))
            if self.printer:
                self.printer.print_success(f"Created database user '{user}'")

        def create_database():
            database.execute(create_database_sql(dbname))
            if self.printer:
                self.printer.print_success(f"Created database '{dbname}'")

        def grant_permissions():
            for statement in grants:
                database.execute(statement)
            if self.printer:
                self.printer.print_success(f"Configured '{user}' user and database permissions")

        return [
            Step(
                description=f"Create database user '{user}'",
                apply=create_role,
                is_applied=role_exists(database, user),
                details=("execute with psql:", "", f"  {masked_create_role}"),
            ),
            Step(
                description=f"Create database '{dbname}'",
                apply=create_database,
                is_applied=database_exists(database, dbname),
                details=("execute with psql:", "", f"  {create_database_sql(dbname)}"),
            ),
            Step(
                description=f"Grant '{user}' access to database '{dbname}'",
                apply=grant_permissions,
                details=("execute with psql:", "", *(f"  {statement}" for statement in grants)),
            ),
        ]

    # ------------------------------------------------------------------
    # repmgr configuration and registration
    # ------------------------------------------------------------------

    def _registration_directory_step(self, ctx: Any) -> Step:
        path = ctx.registration_directory
        return Step(
            description=f"Create repmgr configuration directory '{path}'",
            apply=lambda: ensure_directory(path, printer=self.printer),
            is_applied=directory_exists(path),
            details=(f"create directory '{path}'",),
        )

    def _registration_config_step(self, ctx: Any, config: RegistrationConfig) -> Step:
        path = ctx.registration_config_path
        owner = ctx.settings.service_account
        content = render_registration_config(config)
        return Step(
            description=f"Create repmgr configuration '{path}' (node_id={config.node_id})",
            apply=lambda: write_config_file(
                path, content, mode=REGISTRATION_CONFIG_MODE, owner=owner, printer=self.printer
            ),
            details=(
                f"create '{path}' owned by '{owner}' with mode 0600 and content:",
                "",
                *_content_lines(content),
            ),
        )

    def _register_primary_step(self, ctx: Any, registration: Any, config: RegistrationConfig) -> Step:
        command = _su_display(ctx.settings.service_account, registration.register_primary_command())
        return Step(
            description="Register primary node with repmgr",
            apply=lambda: registration.register_primary(config, ctx.coordinator_password),
            details=(
                "register primary node with:",
                "",
                f'  export PGPASSWORD="{ctx.masked_coordinator_password}"',
                f"  {command}",
            ),
        )

    def _clone_step(self, ctx: Any, registration: Any, config: RegistrationConfig) -> Step:
        endpoint = ctx.primary_endpoint
        command = _su_display(ctx.settings.service_account, registration.clone_command(endpoint))
        return Step(
            description=f"Clone primary node {endpoint.host}:{endpoint.port} with repmgr",
            apply=lambda: registration.clone_from_primary(config, endpoint, ctx.coordinator_password),
            details=(
                "perform clone of primary node with:",
                "",
                f'  export PGPASSWORD="{ctx.masked_coordinator_password}"',
                f"  {command}",
            ),
        )
