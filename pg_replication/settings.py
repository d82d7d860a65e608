#!/usr/bin/env python3
"""Settings module for filesystem layout and tuning defaults.

The defaults match the layout of the Railway PostgreSQL template: the volume
is mounted at ``/var/lib/postgresql/data`` and the actual data directory is
``pgdata`` beneath it. Any value can be overridden from a YAML file passed with
``--config``.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional, Tuple

import yaml

from .errors import SettingsError

DEFAULT_REPLICATION_PARAMETERS = {
    "max_wal_senders": "10",
    "max_replication_slots": "10",
    "wal_level": "replica",
    "wal_log_hints": "on",
    "hot_standby": "on",
    "archive_mode": "on",
    "archive_command": "'/bin/true'",
}


@dataclass(frozen=True)
class Settings:
    """Immutable tool settings"""

    volume_mount_path: str = "/var/lib/postgresql/data"
    pgdata_subdir: str = "pgdata"
    runtime_subdir: str = "railway-runtime"
    service_account: str = "postgres"
    repmgr_user: str = "repmgr"
    repmgr_database: str = "repmgr"
    connect_timeout: int = 10
    search_path: Tuple[str, ...] = ("repmgr", "railway", "public")
    standby_clone_dry_run: bool = True
    replication_parameters: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_REPLICATION_PARAMETERS))
    required_commands: Tuple[str, ...] = ("pg_config", "repmgr", "psql", "su")
    docs_url: str = "https://docs.railway.com/tutorials/set-up-postgres-replication"


def _parameter_value(value: Any) -> str:
    # YAML reads bare on/off as booleans
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)


def _coerce(name: str, value: Any, default: Any) -> Any:
    """Convert a YAML value to the type of the matching default"""
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise SettingsError(f"Setting '{name}' must be true or false, got {value!r}")
        return value
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise SettingsError(f"Setting '{name}' must be an integer, got {value!r}")
        return value
    if isinstance(default, tuple):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise SettingsError(f"Setting '{name}' must be a list of strings")
        return tuple(value)
    if isinstance(default, dict):
        if not isinstance(value, dict):
            raise SettingsError(f"Setting '{name}' must be a mapping")
        # Keep YAML key order; postgresql.conf lines are written in this order
        return {str(key): _parameter_value(item) for key, item in value.items()}
    if not isinstance(value, str) or not value:
        raise SettingsError(f"Setting '{name}' must be a non-empty string")
    return value


def settings_from_mapping(data: Dict[str, Any], base: Optional[Settings] = None) -> Settings:
    """
    Build Settings from a mapping, validating keys and value types.

    Args:
        data: Mapping of setting name to value (typically parsed YAML)
        base: Settings to override, defaults to the built-in defaults

    Returns:
        Settings: New settings instance

    Raises:
        SettingsError: If a key is unknown or a value has the wrong type
    """
    base = base or Settings()
    known = {f.name: getattr(base, f.name) for f in fields(Settings)}

    unknown = sorted(set(data) - set(known))
    if unknown:
        raise SettingsError(f"Unknown setting(s): {', '.join(unknown)}")

    overrides = {name: _coerce(name, value, known[name]) for name, value in data.items()}
    return replace(base, **overrides)


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Load settings from an optional YAML file.

    Args:
        path: Path to a YAML settings file, or None for defaults

    Returns:
        Settings: Defaults overridden by the file's contents

    Raises:
        SettingsError: If the file cannot be read or parsed
    """
    if not path:
        return Settings()

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise SettingsError(f"Cannot read settings file '{path}': {e}") from e
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in settings file '{path}': {e}") from e

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file '{path}' must contain a mapping at the top level")

    return settings_from_mapping(data)
