#!/usr/bin/env python3
"""Orchestrator module for replication role configuration workflow management."""

import time
from typing import Any, Mapping, Optional

from .errors import MissingExecutable, MissingVariable, PreconditionError
from .models import ExecutionMode, NodeRole
from .settings import Settings

CONFIRM_PROMPTS = {
    NodeRole.PRIMARY: "Continue?",
    NodeRole.REPLICA: "This is for a REPLICA. Continue?",
}


class ReplicationOrchestrator:
    """
    Orchestrates configuring a PostgreSQL node as replication PRIMARY or REPLICA:
    environment validation, operator confirmation, the precondition gate,
    planning and execution of the Steps, and completion reporting.
    """

    def __init__(self, **dependencies: Any) -> None:
        """
        Initialize the orchestrator with all required dependencies.

        Args:
            **dependencies: All required function and class dependencies including:
                - printer: PrintManager instance for output formatting
                - format_runtime: Function to format time durations
                - confirm: Function asking the operator a yes/no question
                - load_environment: Function building the EnvironmentContext
                - PreconditionValidator: PreconditionValidator class constructor
                - StepPlanner: StepPlanner class constructor
                - DualModeExecutor: DualModeExecutor class constructor
                - handle_successful_completion / handle_configuration_failure: reporting functions
        """
        # Core dependencies
        self.printer = dependencies["printer"]
        self.format_runtime = dependencies["format_runtime"]
        self.confirm = dependencies["confirm"]
        self.load_environment = dependencies["load_environment"]

        # Class constructors
        self.PreconditionValidator = dependencies["PreconditionValidator"]
        self.StepPlanner = dependencies["StepPlanner"]
        self.DualModeExecutor = dependencies["DualModeExecutor"]

        # Workflow functions
        self.handle_successful_completion = dependencies["handle_successful_completion"]
        self.handle_configuration_failure = dependencies["handle_configuration_failure"]

    def _print_banner(self, ctx: Any, mode: ExecutionMode) -> None:
        """
        Describe the target database and what is about to happen.

        Args:
            ctx: EnvironmentContext of the run
            mode: Execution mode of the run
        """
        variables = ctx.variables
        role_name = ctx.role.name

        self.printer.print_header(f"Railway PostgreSQL Replication Configuration - {role_name}")
        self.printer.print_highlight("Before proceeding, please ensure you have read the tutorial:")
        self.printer.print_info(f"  {ctx.settings.docs_url}")
        self.printer.print_highlight("You are running this script on the following Railway database:")
        self.printer.print_info(f"  - Project        : {variables['RAILWAY_PROJECT_NAME']}")
        self.printer.print_info(f"  - Service        : {variables['RAILWAY_SERVICE_NAME']}")
        self.printer.print_info(f"  - Environment    : {variables['RAILWAY_ENVIRONMENT']}")
        self.printer.print_info(f"  - URL            : {ctx.service_url}")
        self.printer.print_info(f"  - PGHOST/PGPORT  : {ctx.host} / {ctx.port}")

        if ctx.role is NodeRole.REPLICA:
            endpoint = ctx.primary_endpoint
            self.printer.print_highlight("Using the following primary node:")
            self.printer.print_info(f"  - PRIMARY_PGHOST                : {endpoint.host}")
            self.printer.print_info(f"  - PRIMARY_PGPORT                : {endpoint.port}")
            self.printer.print_info(f"  - PRIMARY_REPMGR_USER_PASSWORD  : {ctx.masked_coordinator_password}")

        self.printer.print_warning("THIS SCRIPT SHOULD ONLY BE EXECUTED ON THE DATABASE YOU WISH TO")
        self.printer.print_warning(f"DESIGNATE AS THE {role_name} NODE.")

        if ctx.role is NodeRole.PRIMARY:
            self.printer.print_highlight("  - This script will change your PostgreSQL configuration and set up repmgr")
            self.printer.print_highlight("  - A re-deploy of your database is required for changes to take effect")
            self.printer.print_highlight("  - Please ensure you have a backup of your data before proceeding")

        if mode is ExecutionMode.SIMULATE:
            self.printer.print_warning("--dry-run enabled. You will see a list of changes that will be")
            self.printer.print_warning("applied, but no changes will be made. To apply changes, run")
            self.printer.print_warning("without the --dry-run flag.")

    def _report_missing_dependency(self, error: Exception, docs_url: str) -> None:
        self.printer.print_error(str(error))
        self.printer.print_error("Please ensure you have completed the dependencies installation")
        self.printer.print_error(f"step before running this script. Refer to: {docs_url}")

    def configure_node(
        self,
        role: NodeRole,
        mode: ExecutionMode,
        environ: Mapping[str, str],
        settings: Optional[Any] = None,
    ) -> int:
        """
        Run the whole workflow for one role.

        Args:
            role: Role the node is being configured for
            mode: SIMULATE for --dry-run, EXECUTE otherwise
            environ: Environment variable mapping
            settings: Settings for paths and tuning, defaults if None

        Returns:
            int: Process exit code (0 on success or declined confirmation, 1 on failure)
        """
        start_time = time.time()

        try:
            ctx = self.load_environment(role, environ, settings)
        except (MissingVariable, MissingExecutable) as e:
            self._report_missing_dependency(e, (settings or Settings()).docs_url)
            return 1

        self._print_banner(ctx, mode)

        if not self.confirm(CONFIRM_PROMPTS[role]):
            self.printer.print_info("Exiting...")
            return 0

        try:
            self.PreconditionValidator(printer=self.printer).check(ctx)
        except PreconditionError as e:
            self.printer.print_error(str(e))
            self._exit_with_runtime(start_time)
            return 1

        steps = self.StepPlanner(printer=self.printer).plan(role, ctx)
        report = self.DualModeExecutor(self.printer).run(steps, mode)

        if not report.ok:
            self.handle_configuration_failure(
                ctx, report, start_time, printer=self.printer, format_runtime=self.format_runtime
            )
            return 1

        self.handle_successful_completion(
            ctx, report, start_time, printer=self.printer, format_runtime=self.format_runtime
        )
        return 0

    def _exit_with_runtime(self, start_time: float) -> None:
        """
        Report runtime after a failure.

        Args:
            start_time: Start time of the operation for runtime calculation
        """
        total_runtime = self.format_runtime(start_time, time.time())
        self.printer.print_error(f"Exiting... Total runtime: {total_runtime}")


def handle_successful_completion(
    ctx: Any, report: Any, start_time: float, printer: Any = None, format_runtime: Any = None
) -> None:
    """
    Report a completed run.

    Args:
        ctx: EnvironmentContext of the run
        report: ExecutionReport from the executor
        start_time: Start time of the operation
        printer: PrintManager instance for output formatting
        format_runtime: Function to format time duration
    """
    total_runtime = format_runtime(start_time, time.time())

    if report.mode is ExecutionMode.SIMULATE:
        printer.print_header("Configuration complete in --dry-run mode")
        printer.print_warning(f"{len(report.simulated)} step(s) planned. No changes were made")
        printer.print_warning("To apply changes, run without the --dry-run flag")
    else:
        printer.print_header(f"{ctx.role.name} node configuration complete")
        printer.print_success(f"{len(report.succeeded)} step(s) applied, {len(report.skipped)} already in place")
        printer.print_success("Please re-deploy your Postgres service at:")
        printer.print_success(f"  {ctx.service_url}")
        printer.print_success("for changes to take effect.")
        if ctx.role is NodeRole.REPLICA and ctx.settings.standby_clone_dry_run:
            printer.print_warning("The standby clone ran with --dry-run: it was only validated and no data was copied")
            printer.print_warning("Set `standby_clone_dry_run: false` in the --config file to clone for real")

    printer.print_info(f"Total runtime: {total_runtime}")


def handle_configuration_failure(
    ctx: Any, report: Any, start_time: float, printer: Any = None, format_runtime: Any = None
) -> None:
    """
    Report a run stopped by a failing Step.

    Partial progress is left on disk. Only the include directive blocks a
    re-run, so the hint points at the backup taken before it was appended.

    Args:
        ctx: EnvironmentContext of the run
        report: ExecutionReport with the failed Step and its error
        start_time: Start time of the operation
        printer: PrintManager instance for output formatting
        format_runtime: Function to format time duration
    """
    total_runtime = format_runtime(start_time, time.time())
    printer.print_error(f"Node configuration failed at step: {report.failed.description}")
    printer.print_error(f"Cause: {report.error.cause}")
    printer.print_error(f"Total runtime before failure: {total_runtime}")
    printer.print_info(f"{len(report.succeeded)} step(s) completed before the failure and were left in place")
    if ctx.role is NodeRole.PRIMARY:
        printer.print_info(f"The original configuration is preserved at '{ctx.backup_config_path}'.")
        printer.print_info(f"If '{ctx.config_file_path}' already received the include directive, restore it")
        printer.print_info("from that backup after fixing the cause, then run the script again.")
    else:
        printer.print_info("Fix the cause above and run the script again.")
