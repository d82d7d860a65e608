#!/usr/bin/env python3
"""Backup Manager module for PostgreSQL Replication Configuration Tool."""

import os


class BackupManager:
    """Manages backups of configuration files before they are edited"""

    def __init__(self, printer=None):
        """
        Initialize BackupManager

        Args:
            printer: Printer instance for output
        """
        self.printer = printer

    def make_file_copy(self, current_file_path, new_file_path):
        """
        Make a byte-for-byte copy of a file with a new name.

        Args:
            current_file_path: Path to the source file
            new_file_path: Path to the destination file

        Returns:
            None
        """
        with open(current_file_path, "rb") as f:
            with open(new_file_path, "wb") as f_new:
                f_new.write(f.read())

    def backup_configuration(self, config_file_path, backup_file_path):
        """
        Back up postgresql.conf so the operator can roll back by hand.

        An existing backup is overwritten: the gate in front of the workflow
        guarantees the source file has not been edited by a previous run.

        Args:
            config_file_path: Path to postgresql.conf
            backup_file_path: Path of the backup copy

        Returns:
            str: Path to the backup file
        """
        if self.printer:
            self.printer.print_info(f"Backing up '{config_file_path}' to '{backup_file_path}'")

        self.make_file_copy(config_file_path, backup_file_path)
        os.chmod(backup_file_path, os.stat(config_file_path).st_mode & 0o777)

        if self.printer:
            self.printer.print_success(f"Created backup of PostgreSQL configuration at '{backup_file_path}'")
        return backup_file_path
