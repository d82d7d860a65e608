#!/usr/bin/env python3
"""Configuration Manager module for configuration file creation and management."""

import os
import shutil

from .environment import REPLICATION_CONFIG_NAME

INCLUDE_DIRECTIVE = f"include '{REPLICATION_CONFIG_NAME}'"


def render_replication_config(parameters):
    """
    Render the replication tuning file included from postgresql.conf.

    Args:
        parameters: Ordered mapping of PostgreSQL parameter name to its literal value

    Returns:
        str: File content, one `name = value` line per parameter
    """
    return "".join(f"{name} = {value}\n" for name, value in parameters.items())


def render_registration_config(config):
    """
    Render repmgr.conf for this node.

    Args:
        config: RegistrationConfig for this node

    Returns:
        str: File content
    """
    return (
        f"node_id={config.node_id}\n"
        f"node_name='{config.node_name}'\n"
        f"conninfo='{config.connection_info}'\n"
        f"data_directory='{config.data_directory}'\n"
    )


def render_include_block(timestamp):
    """
    Render the lines appended to postgresql.conf.

    Args:
        timestamp: datetime recorded in the marker comment

    Returns:
        str: Blank separator line, marker comment and the include directive
    """
    return f"\n# Added by Railway on {timestamp.strftime('%Y-%m-%d %H:%M:%S')}\n{INCLUDE_DIRECTIVE}\n"


def has_include_directive(config_file_path):
    """
    Check whether postgresql.conf already includes the replication file.

    Any occurrence counts, including a commented-out one, so a node that was
    touched by a previous run is never configured twice. The file is read as
    bytes: postgresql.conf may hold comments in any encoding.
    """
    with open(config_file_path, "rb") as f:
        return INCLUDE_DIRECTIVE.encode() in f.read()


def write_config_file(path, content, mode=None, owner=None, printer=None):
    """
    Write (or overwrite) a configuration file.

    Args:
        path: Destination path
        content: Full file content
        mode: Optional permission bits applied after writing (e.g. 0o600)
        owner: Optional system account that should own the file (user and group)
        printer: Printer instance for output
    """
    with open(path, "w") as f:
        f.write(content)
    if owner:
        shutil.chown(path, user=owner, group=owner)
    if mode is not None:
        os.chmod(path, mode)
    if printer:
        printer.print_success(f"Created '{path}'")


def append_include_directive(config_file_path, block, printer=None):
    """Append the include block to postgresql.conf"""
    with open(config_file_path, "a") as f:
        f.write(block)
    if printer:
        printer.print_success(f"Added include directive to '{config_file_path}'")


def ensure_directory(path, printer=None):
    """Create a directory and any missing parents"""
    os.makedirs(path, exist_ok=True)
    if printer:
        printer.print_success(f"Created directory '{path}'")
