#!/usr/bin/env python3
"""Value types shared by the planner, executor and registration client."""

from dataclasses import dataclass
from enum import Enum


class NodeRole(Enum):
    """Role this node takes in the two-node replication cluster"""

    PRIMARY = "primary"
    REPLICA = "replica"


class ExecutionMode(Enum):
    """Whether planned Steps are only described or actually applied"""

    SIMULATE = "simulate"
    EXECUTE = "execute"


# Two-node topology: identities are fixed per role, never discovered.
NODE_IDENTITIES = {
    NodeRole.PRIMARY: (1, "node1"),
    NodeRole.REPLICA: (2, "node2"),
}


@dataclass(frozen=True)
class RegistrationConfig:
    """Contents of the repmgr configuration file for this node"""

    node_id: int
    node_name: str
    connection_info: str
    data_directory: str


@dataclass(frozen=True)
class PrimaryEndpoint:
    """Where a replica clones its data from"""

    host: str
    port: str
