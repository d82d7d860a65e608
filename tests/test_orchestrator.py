#!/usr/bin/env python3
"""
Tests for ReplicationOrchestrator with every collaborator mocked.

Covers the control flow of configure_node(): dependency validation, operator
confirmation, the precondition gate, execution and completion reporting.
"""

import dataclasses
import os
import sys

import pytest

# Add parent directory to path for module imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from unittest.mock import Mock  # noqa: E402
from pg_replication.environment import load_environment  # noqa: E402
from pg_replication.errors import AlreadyConfigured, MissingExecutable, MissingVariable  # noqa: E402
from pg_replication.models import ExecutionMode, NodeRole  # noqa: E402
from pg_replication.orchestrator import (  # noqa: E402
    ReplicationOrchestrator,
    handle_configuration_failure,
    handle_successful_completion,
)
from pg_replication.step_executor import ExecutionReport  # noqa: E402
from pg_replication.step_planner import Step  # noqa: E402


def printed(mock_printer):
    """All text passed to any printer method"""
    lines = []
    for _name, args, _kwargs in mock_printer.method_calls:
        lines.extend(str(arg) for arg in args)
    return "\n".join(lines)


@pytest.fixture
def steps():
    return [Step(description="first", apply=Mock()), Step(description="second", apply=Mock())]


@pytest.fixture
def dependencies(mock_printer, primary_context, steps):
    """Mocked orchestrator dependencies for a fresh primary node"""
    planner = Mock()
    planner.plan.return_value = steps
    executor = Mock()
    executor.run.return_value = ExecutionReport(mode=ExecutionMode.EXECUTE, succeeded=list(steps))

    return {
        "printer": mock_printer,
        "format_runtime": Mock(return_value="1s"),
        "confirm": Mock(return_value=True),
        "load_environment": Mock(return_value=primary_context),
        "PreconditionValidator": Mock(),
        "StepPlanner": Mock(return_value=planner),
        "DualModeExecutor": Mock(return_value=executor),
        "handle_successful_completion": Mock(),
        "handle_configuration_failure": Mock(),
    }


@pytest.fixture
def orchestrator(dependencies):
    return ReplicationOrchestrator(**dependencies)


class TestConfigureNode:
    def test_success(self, orchestrator, dependencies, primary_environ, settings, steps):
        exit_code = orchestrator.configure_node(NodeRole.PRIMARY, ExecutionMode.EXECUTE, primary_environ, settings)

        assert exit_code == 0
        dependencies["load_environment"].assert_called_once_with(NodeRole.PRIMARY, primary_environ, settings)
        dependencies["confirm"].assert_called_once_with("Continue?")
        planner = dependencies["StepPlanner"].return_value
        planner.plan.assert_called_once_with(NodeRole.PRIMARY, dependencies["load_environment"].return_value)
        dependencies["DualModeExecutor"].return_value.run.assert_called_once_with(steps, ExecutionMode.EXECUTE)
        dependencies["handle_successful_completion"].assert_called_once()
        dependencies["handle_configuration_failure"].assert_not_called()

    @pytest.mark.parametrize(
        "error",
        [MissingVariable("REPMGR_USER_PASSWORD"), MissingExecutable("repmgr")],
    )
    def test_missing_dependency(self, orchestrator, dependencies, mock_printer, primary_environ, error):
        dependencies["load_environment"].side_effect = error

        exit_code = orchestrator.configure_node(NodeRole.PRIMARY, ExecutionMode.EXECUTE, primary_environ)

        assert exit_code == 1
        dependencies["confirm"].assert_not_called()
        dependencies["StepPlanner"].assert_not_called()
        output = printed(mock_printer)
        assert str(error) in output
        assert "https://docs.railway.com/tutorials/set-up-postgres-replication" in output

    def test_declined_confirmation(self, orchestrator, dependencies, mock_printer, primary_environ):
        dependencies["confirm"].return_value = False

        exit_code = orchestrator.configure_node(NodeRole.PRIMARY, ExecutionMode.EXECUTE, primary_environ)

        assert exit_code == 0
        dependencies["PreconditionValidator"].assert_not_called()
        dependencies["StepPlanner"].assert_not_called()
        mock_printer.print_info.assert_called_with("Exiting...")

    def test_replica_prompt(self, orchestrator, dependencies, replica_context, replica_environ):
        dependencies["load_environment"].return_value = replica_context
        dependencies["confirm"].return_value = False

        orchestrator.configure_node(NodeRole.REPLICA, ExecutionMode.EXECUTE, replica_environ)

        dependencies["confirm"].assert_called_once_with("This is for a REPLICA. Continue?")

    def test_precondition_failure_plans_nothing(
        self, orchestrator, dependencies, mock_printer, primary_context, primary_environ
    ):
        validator = dependencies["PreconditionValidator"].return_value
        validator.check.side_effect = AlreadyConfigured(primary_context.config_file_path)

        exit_code = orchestrator.configure_node(NodeRole.PRIMARY, ExecutionMode.SIMULATE, primary_environ)

        assert exit_code == 1
        validator.check.assert_called_once_with(primary_context)
        dependencies["StepPlanner"].assert_not_called()
        dependencies["DualModeExecutor"].assert_not_called()
        assert "only be run once" in printed(mock_printer)

    def test_gate_runs_in_dry_run_too(self, orchestrator, dependencies, primary_environ):
        orchestrator.configure_node(NodeRole.PRIMARY, ExecutionMode.SIMULATE, primary_environ)

        dependencies["PreconditionValidator"].return_value.check.assert_called_once()
        dependencies["DualModeExecutor"].return_value.run.assert_called_once()
        assert dependencies["DualModeExecutor"].return_value.run.call_args.args[1] is ExecutionMode.SIMULATE

    def test_step_failure(self, orchestrator, dependencies, primary_environ, steps):
        failed_report = ExecutionReport(mode=ExecutionMode.EXECUTE, failed=steps[0], error=Mock())
        dependencies["DualModeExecutor"].return_value.run.return_value = failed_report

        exit_code = orchestrator.configure_node(NodeRole.PRIMARY, ExecutionMode.EXECUTE, primary_environ)

        assert exit_code == 1
        dependencies["handle_configuration_failure"].assert_called_once()
        assert dependencies["handle_configuration_failure"].call_args.args[1] is failed_report
        dependencies["handle_successful_completion"].assert_not_called()


class TestBanner:
    def test_primary_banner(self, orchestrator, mock_printer, primary_environ):
        orchestrator.configure_node(NodeRole.PRIMARY, ExecutionMode.EXECUTE, primary_environ)

        output = printed(mock_printer)
        assert "Railway PostgreSQL Replication Configuration - PRIMARY" in output
        assert "replication-demo" in output
        assert "https://railway.app/project/0f1e2d3c-project/service/4b5a6978-service" in output
        assert "DESIGNATE AS THE PRIMARY NODE." in output
        assert "s3cret-primary-pw" not in output

    def test_replica_banner_masks_primary_password(
        self, orchestrator, dependencies, mock_printer, replica_context, replica_environ
    ):
        dependencies["load_environment"].return_value = replica_context

        orchestrator.configure_node(NodeRole.REPLICA, ExecutionMode.EXECUTE, replica_environ)

        output = printed(mock_printer)
        assert "PRIMARY_PGHOST                : postgres.railway.internal" in output
        assert "***a-pw" in output
        assert "s3cret-replica-pw" not in output

    def test_dry_run_warning(self, orchestrator, mock_printer, primary_environ):
        orchestrator.configure_node(NodeRole.PRIMARY, ExecutionMode.SIMULATE, primary_environ)
        assert "--dry-run enabled" in printed(mock_printer)


class TestCompletionHandlers:
    def test_execute_success_points_to_redeploy(self, primary_context, mock_printer, steps):
        report = ExecutionReport(mode=ExecutionMode.EXECUTE, succeeded=steps[:1], skipped=steps[1:])

        handle_successful_completion(
            primary_context, report, 0.0, printer=mock_printer, format_runtime=Mock(return_value="3s")
        )

        output = printed(mock_printer)
        assert "1 step(s) applied, 1 already in place" in output
        assert primary_context.service_url in output
        assert "Total runtime: 3s" in output

    def test_dry_run_success(self, primary_context, mock_printer, steps):
        report = ExecutionReport(mode=ExecutionMode.SIMULATE, simulated=list(steps))

        handle_successful_completion(
            primary_context, report, 0.0, printer=mock_printer, format_runtime=Mock(return_value="0s")
        )

        output = printed(mock_printer)
        assert "2 step(s) planned. No changes were made" in output
        assert "re-deploy" not in output

    def test_replica_clone_dry_run_is_called_out(self, replica_context, mock_printer, steps):
        report = ExecutionReport(mode=ExecutionMode.EXECUTE, succeeded=list(steps))

        handle_successful_completion(
            replica_context, report, 0.0, printer=mock_printer, format_runtime=Mock(return_value="1s")
        )

        output = printed(mock_printer)
        assert "only validated and no data was copied" in output
        assert "standby_clone_dry_run: false" in output

    def test_replica_real_clone_has_no_validation_warning(
        self, replica_environ, settings, fake_which, mock_printer, steps
    ):
        ctx = load_environment(
            NodeRole.REPLICA,
            replica_environ,
            dataclasses.replace(settings, standby_clone_dry_run=False),
            which=fake_which,
        )
        report = ExecutionReport(mode=ExecutionMode.EXECUTE, succeeded=list(steps))

        handle_successful_completion(ctx, report, 0.0, printer=mock_printer, format_runtime=Mock(return_value="1s"))

        assert "only validated" not in printed(mock_printer)

    def test_primary_has_no_clone_warning(self, primary_context, mock_printer, steps):
        report = ExecutionReport(mode=ExecutionMode.EXECUTE, succeeded=list(steps))

        handle_successful_completion(
            primary_context, report, 0.0, printer=mock_printer, format_runtime=Mock(return_value="1s")
        )

        assert "only validated" not in printed(mock_printer)

    def test_primary_failure_mentions_backup(self, primary_context, mock_printer, steps):
        error = Mock(cause=OSError("disk full"))
        report = ExecutionReport(mode=ExecutionMode.EXECUTE, failed=steps[1], error=error, succeeded=steps[:1])

        handle_configuration_failure(
            primary_context, report, 0.0, printer=mock_printer, format_runtime=Mock(return_value="2s")
        )

        output = printed(mock_printer)
        assert "Node configuration failed at step: second" in output
        assert "Cause: disk full" in output
        assert primary_context.backup_config_path in output

    def test_replica_failure(self, replica_context, mock_printer, steps):
        report = ExecutionReport(mode=ExecutionMode.EXECUTE, failed=steps[0], error=Mock(cause="boom"))

        handle_configuration_failure(
            replica_context, report, 0.0, printer=mock_printer, format_runtime=Mock(return_value="2s")
        )

        output = printed(mock_printer)
        assert "Fix the cause above and run the script again." in output
        assert replica_context.backup_config_path not in output
