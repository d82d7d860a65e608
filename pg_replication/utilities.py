#!/usr/bin/env python3
"""Utilities module for PostgreSQL Replication Configuration Tool."""

import re
import shlex
import subprocess
from typing import Iterable, List, Mapping, Optional

from .print_manager import printer as default_printer

_PLAIN_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


def mask_secret(value: str) -> str:
    """Obscure a secret for display, keeping only the last four characters of long ones"""
    if len(value) <= 4:
        return "***"
    return f"***{value[-4:]}"


def mask_secrets(text: str, secrets: Iterable[str]) -> str:
    """Replace every occurrence of each secret in text by its masked form"""
    for secret in secrets:
        if not secret:
            continue
        # Also catch the form embedded in a SQL string literal
        for form in (secret.replace("'", "''"), secret):
            text = text.replace(form, mask_secret(secret))
    return text


def display_command(command: List[str], secrets: Iterable[str] = ()) -> str:
    """Shell-quoted command line with every secret masked"""
    secrets = tuple(secrets)
    return shlex.join(mask_secrets(argument, secrets) for argument in command)


def run_command(
    command: List[str],
    env: Optional[Mapping[str, str]] = None,
    printer=None,
    timeout: Optional[float] = None,
    secrets: Iterable[str] = (),
) -> subprocess.CompletedProcess:
    """
    Run an external command and return its result without interpreting it.

    No retries are attempted. Exit-code interpretation is left to the caller.

    Args:
        command: Command and arguments
        env: Complete environment for the child, or None to inherit this process's
        printer: Printer instance for debug output
        timeout: Optional timeout in seconds
        secrets: Values masked in the debug output of the command line

    Returns:
        subprocess.CompletedProcess: Result of the command. A command that could not
        be started at all is reported with exit code 127 and the OS error as stderr.
    """
    printer = printer or default_printer
    printer.print_action(f"Executing command: {display_command(command, secrets)}")

    try:
        return subprocess.run(
            command,
            capture_output=True,
            text=True,
            env=None if env is None else dict(env),
            timeout=timeout,
        )
    except OSError as e:
        return subprocess.CompletedProcess(command, 127, stdout="", stderr=str(e))


def run_as_user(
    user: str,
    command: List[str],
    env: Optional[Mapping[str, str]] = None,
    printer=None,
) -> subprocess.CompletedProcess:
    """
    Run a command as another system user with `su -m`, preserving the environment.

    Args:
        user: Account to switch to (usually the database service account)
        command: Command and arguments to run as that user
        env: Complete environment for the child, or None to inherit this process's
        printer: Printer instance for debug output

    Returns:
        subprocess.CompletedProcess: Result of the su invocation
    """
    return run_command(["su", "-m", user, "-c", shlex.join(command)], env=env, printer=printer)


def format_runtime(start_time, end_time):
    """
    Format runtime duration in a human-readable way.

    Args:
        start_time (float): Start timestamp from time.time()
        end_time (float): End timestamp from time.time()

    Returns:
        str: Formatted runtime string (e.g., "5m 23s", "1h 15m 30s")
    """
    total_seconds = int(end_time - start_time)

    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60

    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    elif minutes > 0:
        return f"{minutes}m {seconds}s"
    else:
        return f"{seconds}s"


def quote_literal(value):
    """Quote a value as a SQL string literal"""
    return "'" + str(value).replace("'", "''") + "'"


def quote_identifier(name):
    """
    Quote a SQL identifier only when it needs quoting.

    Lower-case names made of letters, digits and underscores are returned as-is
    so generated SQL stays readable in --dry-run output.
    """
    if _PLAIN_IDENTIFIER.match(name):
        return name
    return '"' + name.replace('"', '""') + '"'
