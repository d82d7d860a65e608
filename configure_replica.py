#!/usr/bin/env python3
"""
PostgreSQL Replication Configuration Tool - REPLICA

Run this on the Railway PostgreSQL service that should follow the primary.
Requires PRIMARY_PGHOST, PRIMARY_PGPORT and PRIMARY_REPMGR_USER_PASSWORD.
"""

from pg_replication.cli import configure_replica

if __name__ == "__main__":
    configure_replica()
