#!/usr/bin/env python3
"""Environment module: resolves and validates everything a run needs up front."""

import os
import shutil
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple

from .errors import MissingExecutable, MissingVariable
from .models import NodeRole, PrimaryEndpoint
from .settings import Settings
from .utilities import mask_secret

COMMON_REQUIRED_VARIABLES = (
    "RAILWAY_PROJECT_NAME",
    "RAILWAY_SERVICE_NAME",
    "RAILWAY_ENVIRONMENT",
    "RAILWAY_PROJECT_ID",
    "RAILWAY_SERVICE_ID",
    "RAILWAY_ENVIRONMENT_ID",
    "PGHOST",
    "PGPORT",
)

ROLE_REQUIRED_VARIABLES = {
    NodeRole.PRIMARY: ("REPMGR_USER_PASSWORD",),
    NodeRole.REPLICA: ("PRIMARY_REPMGR_USER_PASSWORD", "PRIMARY_PGHOST", "PRIMARY_PGPORT"),
}

REPLICATION_CONFIG_NAME = "postgresql.replication.conf"


def required_variables(role: NodeRole) -> Tuple[str, ...]:
    """Return the ordered names of the environment variables a role needs"""
    return COMMON_REQUIRED_VARIABLES + ROLE_REQUIRED_VARIABLES[role]


@dataclass(frozen=True)
class EnvironmentContext:
    """
    Validated, read-only inputs for one configuration run.

    Built once by load_environment() and passed to every component, so no
    component reads the process environment on its own.
    """

    role: NodeRole
    variables: Mapping[str, str]
    executables: Mapping[str, str]
    settings: Settings
    data_directory: str
    config_file_path: str
    replication_config_path: str
    backup_config_path: str
    runtime_directory: str
    registration_directory: str
    registration_config_path: str
    # Full environment handed to psql and repmgr child processes
    process_environment: Mapping[str, str]

    @property
    def host(self) -> str:
        return self.variables["PGHOST"]

    @property
    def port(self) -> str:
        return self.variables["PGPORT"]

    @property
    def coordinator_password(self) -> str:
        """Password of the repmgr database user this node authenticates with"""
        if self.role is NodeRole.PRIMARY:
            return self.variables["REPMGR_USER_PASSWORD"]
        return self.variables["PRIMARY_REPMGR_USER_PASSWORD"]

    @property
    def masked_coordinator_password(self) -> str:
        return mask_secret(self.coordinator_password)

    @property
    def primary_endpoint(self) -> Optional[PrimaryEndpoint]:
        """Endpoint of the primary to clone from, None when this node is the primary"""
        if self.role is not NodeRole.REPLICA:
            return None
        return PrimaryEndpoint(host=self.variables["PRIMARY_PGHOST"], port=self.variables["PRIMARY_PGPORT"])

    @property
    def service_url(self) -> str:
        """Railway dashboard URL of the service being configured"""
        return (
            f"https://railway.app/project/{self.variables['RAILWAY_PROJECT_ID']}"
            f"/service/{self.variables['RAILWAY_SERVICE_ID']}"
            f"?environmentId={self.variables['RAILWAY_ENVIRONMENT_ID']}"
        )


def _resolve_variables(role: NodeRole, environ: Mapping[str, str]) -> dict:
    variables = {}
    for name in required_variables(role):
        value = environ.get(name)
        if not value:
            raise MissingVariable(name)
        variables[name] = value
    return variables


def _resolve_executables(commands, which: Callable[[str], Optional[str]]) -> dict:
    executables = {}
    for command in commands:
        location = which(command)
        if not location:
            raise MissingExecutable(command)
        executables[command] = location
    return executables


def load_environment(
    role: NodeRole,
    environ: Mapping[str, str],
    settings: Optional[Settings] = None,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> EnvironmentContext:
    """
    Validate inputs for a role and resolve all paths.

    Args:
        role: Role the node is being configured for
        environ: Environment variable mapping (usually a copy of os.environ)
        settings: Filesystem layout and tuning settings, defaults if None
        which: PATH lookup function

    Returns:
        EnvironmentContext: Fully resolved, immutable context

    Raises:
        MissingVariable: For the first required variable that is absent or empty
        MissingExecutable: For the first required command not found on PATH
    """
    settings = settings or Settings()
    variables = _resolve_variables(role, environ)
    executables = _resolve_executables(settings.required_commands, which)

    data_directory = os.path.join(settings.volume_mount_path, settings.pgdata_subdir)
    runtime_directory = os.path.join(settings.volume_mount_path, settings.runtime_subdir)
    registration_directory = os.path.join(runtime_directory, "repmgr")

    return EnvironmentContext(
        role=role,
        variables=MappingProxyType(variables),
        executables=MappingProxyType(executables),
        settings=settings,
        data_directory=data_directory,
        config_file_path=os.path.join(data_directory, "postgresql.conf"),
        replication_config_path=os.path.join(data_directory, REPLICATION_CONFIG_NAME),
        backup_config_path=os.path.join(data_directory, "postgresql.bak.conf"),
        runtime_directory=runtime_directory,
        registration_directory=registration_directory,
        registration_config_path=os.path.join(registration_directory, "repmgr.conf"),
        process_environment=MappingProxyType(dict(environ)),
    )
