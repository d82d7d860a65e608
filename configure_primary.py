#!/usr/bin/env python3
"""
PostgreSQL Replication Configuration Tool - PRIMARY

Run this on the Railway PostgreSQL service you want to designate as the
replication primary. Pass --dry-run to see every change without applying it.
"""

from pg_replication.cli import configure_primary

if __name__ == "__main__":
    configure_primary()
