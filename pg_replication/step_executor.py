#!/usr/bin/env python3
"""Step Executor module: walks a planned Step list in --dry-run or real mode."""

import subprocess
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .errors import ReplicationSetupError, StepApplyError
from .models import ExecutionMode

# Failures a Step may raise; anything else is a bug and propagates.
STEP_FAILURES = (ReplicationSetupError, OSError, subprocess.SubprocessError, LookupError)


@dataclass
class ExecutionReport:
    """Outcome of walking a Step list"""

    mode: ExecutionMode
    succeeded: List[Any] = field(default_factory=list)
    skipped: List[Any] = field(default_factory=list)
    simulated: List[Any] = field(default_factory=list)
    failed: Optional[Any] = None
    error: Optional[StepApplyError] = None

    @property
    def ok(self) -> bool:
        return self.failed is None


class DualModeExecutor:
    """
    Runs Steps in order in one fixed ExecutionMode.

    SIMULATE prints each Step's planned content and never calls is_applied()
    or apply(). EXECUTE skips Steps whose is_applied() is true, applies the
    rest, and stops at the first failure.
    """

    def __init__(self, printer: Any) -> None:
        self.printer = printer

    def run(self, steps: List[Any], mode: ExecutionMode) -> ExecutionReport:
        """
        Walk the Steps.

        Args:
            steps: Steps from StepPlanner.plan(), in order
            mode: SIMULATE or EXECUTE for the whole run

        Returns:
            ExecutionReport: What was simulated, applied, skipped or failed
        """
        report = ExecutionReport(mode=mode)
        total_steps = len(steps)

        for index, step in enumerate(steps, start=1):
            self.printer.print_step(index, total_steps, step.description)

            if mode is ExecutionMode.SIMULATE:
                self._simulate(step)
                report.simulated.append(step)
                continue

            try:
                if step.is_applied():
                    self.printer.print_info("Already applied, skipping")
                    report.skipped.append(step)
                    continue
                step.apply()
            except STEP_FAILURES as e:
                report.failed = step
                report.error = StepApplyError(step, e)
                self.printer.print_error(str(report.error))
                remaining = total_steps - index
                if remaining:
                    self.printer.print_warning(f"Stopping: {remaining} remaining step(s) were not run")
                break

            report.succeeded.append(step)

        return report

    def _simulate(self, step: Any) -> None:
        self.printer.print_dry_run(step.description)
        for line in step.details:
            self.printer.print_dry_run(line)
