#!/usr/bin/env python3
"""
Packaging for the PostgreSQL Replication Configuration Tool.
"""

from setuptools import find_packages, setup

setup(
    name="pg-replication-setup",
    version="0.1.0",
    description="Configure a Railway PostgreSQL service as a repmgr replication primary or replica",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=["PyYAML>=6.0"],
    extras_require={"test": ["pytest>=7.0"]},
    entry_points={
        "console_scripts": [
            "configure-primary=pg_replication.cli:configure_primary",
            "configure-replica=pg_replication.cli:configure_replica",
        ]
    },
)
