#!/usr/bin/env python3
"""Registration Client module wrapping the repmgr coordinator binary."""

from typing import Any, List, Mapping, Optional

from .errors import CloneError, RegistrationError
from .models import PrimaryEndpoint, RegistrationConfig
from .utilities import run_as_user


class ClusterRegistrationClient:
    """
    Runs repmgr subcommands as the database service account.

    This class is the only place that interprets repmgr exit codes: zero is
    success, anything else is a failure. Output is never parsed.
    """

    def __init__(
        self,
        config_path: str,
        service_account: str = "postgres",
        repmgr_user: str = "repmgr",
        repmgr_database: str = "repmgr",
        clone_dry_run: bool = True,
        printer: Any = None,
        run_as_user: Any = run_as_user,
        environment: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config_path: Path of the repmgr.conf file passed with -f
            service_account: System user repmgr runs as, so produced files keep the right owner
            repmgr_user: Database user to connect to the primary as when cloning
            repmgr_database: Database to connect to on the primary when cloning
            clone_dry_run: Pass --dry-run to `standby clone` (validate without copying data)
            printer: Printer instance for output
            run_as_user: Function running a command as another user, injectable for tests
            environment: Base environment for repmgr. With None, calls without a credential
                inherit this process's environment and calls with one get only PGPASSWORD
        """
        self.config_path = config_path
        self.service_account = service_account
        self.repmgr_user = repmgr_user
        self.repmgr_database = repmgr_database
        self.clone_dry_run = clone_dry_run
        self.printer = printer
        self.run_as_user = run_as_user
        self.environment = environment

    @classmethod
    def from_context(cls, ctx: Any, printer: Any = None, run_as_user: Any = run_as_user) -> "ClusterRegistrationClient":
        settings = ctx.settings
        return cls(
            ctx.registration_config_path,
            service_account=settings.service_account,
            repmgr_user=settings.repmgr_user,
            repmgr_database=settings.repmgr_database,
            clone_dry_run=settings.standby_clone_dry_run,
            printer=printer,
            run_as_user=run_as_user,
            environment=ctx.process_environment,
        )

    def register_primary_command(self) -> List[str]:
        return ["repmgr", "-f", self.config_path, "primary", "register"]

    def clone_command(self, endpoint: PrimaryEndpoint) -> List[str]:
        command = [
            "repmgr",
            "-h",
            endpoint.host,
            "-p",
            str(endpoint.port),
            "-U",
            self.repmgr_user,
            "-d",
            self.repmgr_database,
            "-f",
            self.config_path,
            "standby",
            "clone",
        ]
        if self.clone_dry_run:
            command.append("--dry-run")
        return command

    def _run(self, command: List[str], credential: Optional[str]):
        env = dict(self.environment) if self.environment is not None else None
        if credential:
            env = {**(env or {}), "PGPASSWORD": credential}
        return self.run_as_user(self.service_account, command, env=env, printer=self.printer)

    def register_primary(self, config: RegistrationConfig, credential: Optional[str] = None) -> None:
        """
        Register this node as the cluster primary.

        Args:
            config: Registration settings written to the repmgr configuration file
            credential: Password of the repmgr database user

        Raises:
            RegistrationError: If repmgr exits with a non-zero status
        """
        if self.printer:
            self.printer.print_info(f"Registering primary node '{config.node_name}' (node_id={config.node_id})...")
        result = self._run(self.register_primary_command(), credential)
        if result.returncode != 0:
            raise RegistrationError(result.returncode, result.stderr)
        if self.printer:
            self.printer.print_success("Successfully registered primary node")

    def clone_from_primary(self, config: RegistrationConfig, endpoint: PrimaryEndpoint, credential: str) -> None:
        """
        Clone this node from the primary as a standby.

        Args:
            config: Registration settings written to the repmgr configuration file
            endpoint: Host and port of the primary
            credential: Password of the primary's repmgr database user

        Raises:
            CloneError: If repmgr exits with a non-zero status
        """
        if self.printer:
            self.printer.print_info(
                f"Cloning '{config.node_name}' (node_id={config.node_id}) from primary "
                f"{endpoint.host}:{endpoint.port}..."
            )
        result = self._run(self.clone_command(endpoint), credential)
        if result.returncode != 0:
            raise CloneError(result.returncode, result.stderr)
        if self.printer:
            self.printer.print_success("Successfully cloned primary node")
