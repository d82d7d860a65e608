#!/usr/bin/env python3
"""Command-line entry points: one per node role."""

import os
import sys

from .arguments_parser import ArgumentsParser
from .environment import load_environment
from .errors import SettingsError
from .models import ExecutionMode, NodeRole
from .orchestrator import ReplicationOrchestrator, handle_configuration_failure, handle_successful_completion
from .precondition_validator import PreconditionValidator
from .print_manager import printer
from .settings import load_settings
from .step_executor import DualModeExecutor
from .step_planner import StepPlanner
from .utilities import format_runtime


def confirm(prompt, default="Y"):
    """
    Ask the operator a yes/no question on the terminal.

    An empty answer selects the default. End of input counts as "no".
    """
    suffix = " [Y/n]: " if default == "Y" else " [y/N]: "
    try:
        response = input(f"\n{prompt}{suffix}").strip()
    except EOFError:
        return False
    if not response:
        response = default
    return response in ("y", "Y")


def build_orchestrator(**overrides):
    """Create a ReplicationOrchestrator wired with the real collaborators"""
    dependencies = {
        "printer": printer,
        "format_runtime": format_runtime,
        "confirm": confirm,
        "load_environment": load_environment,
        "PreconditionValidator": PreconditionValidator,
        "StepPlanner": StepPlanner,
        "DualModeExecutor": DualModeExecutor,
        "handle_successful_completion": handle_successful_completion,
        "handle_configuration_failure": handle_configuration_failure,
    }
    dependencies.update(overrides)
    return ReplicationOrchestrator(**dependencies)


def main(role, argv=None, environ=None, orchestrator=None):
    """
    Configure this node for a role.

    Args:
        role: NodeRole selected by the entry point
        argv: Command-line arguments, defaults to sys.argv[1:]
        environ: Environment mapping, defaults to a snapshot of os.environ
        orchestrator: Pre-built orchestrator, mainly for tests

    Returns:
        int: Process exit code
    """
    args = ArgumentsParser.parse_arguments(role, argv)
    mode = ExecutionMode.SIMULATE if args.dry_run else ExecutionMode.EXECUTE

    try:
        settings = load_settings(args.config)
    except SettingsError as e:
        printer.print_error(str(e))
        return 1

    orchestrator = orchestrator or build_orchestrator()
    environ = dict(os.environ) if environ is None else environ

    try:
        return orchestrator.configure_node(role, mode, environ, settings)
    except KeyboardInterrupt:
        printer.print_error("Interrupted")
        return 1


def configure_primary():
    sys.exit(main(NodeRole.PRIMARY))


def configure_replica():
    sys.exit(main(NodeRole.REPLICA))
