#!/usr/bin/env python3
"""Exception hierarchy for the PostgreSQL Replication Configuration Tool.

Every failure in the tool is fatal to the run. Components raise one of the
exceptions below and the orchestrator turns it into an error message and a
non-zero exit code.
"""


class ReplicationSetupError(Exception):
    """Base class for all errors raised while configuring a node"""


class SettingsError(ReplicationSetupError):
    """The YAML settings file could not be read or contains invalid values"""


class MissingVariable(ReplicationSetupError):
    """A required environment variable is absent or empty"""

    def __init__(self, name):
        self.name = name
        super().__init__(f"Missing required environment variable: {name}")


class MissingExecutable(ReplicationSetupError):
    """A required command could not be found on PATH"""

    def __init__(self, name):
        self.name = name
        super().__init__(f"Required cmd '{name}' not found in PATH")


class PreconditionError(ReplicationSetupError):
    """The node is not eligible for configuration"""

    def __init__(self, reason):
        self.reason = reason
        super().__init__(reason)


class MissingPath(PreconditionError):
    """A directory or file the workflow relies on does not exist"""

    def __init__(self, path, kind):
        self.path = path
        self.kind = kind
        super().__init__(f"{kind} '{path}' not found")


class AlreadyConfigured(PreconditionError):
    """The configuration file already carries the replication include directive"""

    def __init__(self, config_file_path):
        self.config_file_path = config_file_path
        super().__init__(
            f"Include directive already exists in '{config_file_path}'. This script should only be run once."
        )


class QueryError(ReplicationSetupError):
    """A psql invocation exited with a non-zero status"""

    def __init__(self, sql, returncode, stderr=""):
        self.sql = sql
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip().splitlines()[-1] if stderr and stderr.strip() else "no error output"
        super().__init__(f"psql exited with code {returncode}: {detail}")


class _CoordinatorError(ReplicationSetupError):
    action = "repmgr command"

    def __init__(self, returncode, stderr=""):
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip().splitlines()[-1] if stderr and stderr.strip() else "no error output"
        super().__init__(f"{self.action} failed with exit code {returncode}: {detail}")


class RegistrationError(_CoordinatorError):
    """`repmgr primary register` failed"""

    action = "Primary registration"


class CloneError(_CoordinatorError):
    """`repmgr standby clone` failed"""

    action = "Standby clone"


class StepApplyError(ReplicationSetupError):
    """A Step raised while being checked or applied"""

    def __init__(self, step, cause):
        self.step = step
        self.cause = cause
        super().__init__(f"Step '{step.description}' failed: {cause}")
