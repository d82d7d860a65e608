#!/usr/bin/env python3
"""Idempotency guards: side-effect-free "already applied?" checks for Steps.

Each guard is scoped to exactly one named resource. File writes are not
guarded (rewriting a fixed file is harmless) and the append to
postgresql.conf is guarded by the precondition gate instead, because a
per-line check on a partially applied append is unreliable.
"""

import os


def role_exists(database_client, name):
    """Guard for a database role, checked by exact name"""
    return lambda: database_client.role_exists(name)


def database_exists(database_client, name):
    """Guard for a database, checked by exact name"""
    return lambda: database_client.database_exists(name)


def directory_exists(path):
    """Guard for a directory, checked by path"""
    return lambda: os.path.isdir(path)


def never_applied():
    """Guard for Steps that are always (re)applied"""
    return False
