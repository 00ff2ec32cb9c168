"""
Admin credential management via the binary's own ``admin`` subcommand.

The binary owns its credential store; alistctl only runs
``alist admin random`` / ``alist admin set <pw>`` and scrapes the
``username:`` / ``password:`` lines from the output.  The service is
stopped around the call so the running server is not holding the
database open.
"""

from __future__ import annotations

import logging
from pathlib import Path

from alistctl.core.errors import EmptyPasswordError, NotInstalled
from alistctl.core.execution.subprocess_runner import Runner, run_command
from alistctl.core.models.install import Credential
from alistctl.core.services.systemd_service import ServiceRegistrar

logger = logging.getLogger(__name__)


def _token_after(line: str, marker: str) -> str:
    return "".join(line.split(marker, 1)[1].split())


def parse_credentials(output: str) -> Credential:
    """Extract username/password from admin subcommand output.

    Lines look like ``... username: admin`` (log prefixes vary between
    releases).  Missing tokens become empty strings.
    """
    username = ""
    password = ""
    for line in output.splitlines():
        if "username:" in line:
            username = _token_after(line, "username:")
        if "password:" in line:
            password = _token_after(line, "password:")
    return Credential(username=username, password=password)


class CredentialManager:
    """Run admin subcommands against one install directory."""

    def __init__(
        self,
        install_dir: Path,
        binary_name: str = "alist",
        *,
        registrar: ServiceRegistrar | None = None,
        run: Runner = run_command,
    ):
        self.install_dir = Path(install_dir)
        self.binary_name = binary_name
        self.registrar = registrar
        self._run = run

    @property
    def binary(self) -> Path:
        return self.install_dir / self.binary_name

    def _admin(self, *args: str) -> Credential:
        if not self.binary.is_file():
            raise NotInstalled(f"{self.binary} not found, install first")
        result = self._run(
            [str(self.binary), "admin", *args],
            cwd=str(self.install_dir),
            merge_stderr=True,
            redact=True,
            timeout=60,
        )
        if not result["ok"]:
            logger.warning("admin %s exited with %s", args[0], result.get("returncode"))
        credential = parse_credentials(result.get("stdout", ""))
        if not credential.username:
            logger.warning("No credentials in admin %s output", args[0])
        return credential

    def _with_service_stopped(self, *args: str) -> Credential:
        if self.registrar is None:
            return self._admin(*args)
        self.registrar.stop()
        try:
            return self._admin(*args)
        finally:
            self.registrar.restart()

    def mint_initial_credential(self) -> Credential:
        """``admin random`` on a fresh install (no service to stop yet)."""
        return self._admin("random")

    def random_credential(self) -> Credential:
        """Generate a random admin password."""
        credential = self._with_service_stopped("random")
        logger.info("Random admin password generated for %r", credential.username)
        return credential

    def set_credential(self, password: str) -> Credential:
        """Set the admin password to ``password``.

        Raises:
            EmptyPasswordError: If ``password`` is empty.
        """
        if not password:
            raise EmptyPasswordError()
        credential = self._with_service_stopped("set", password)
        if credential.username and not credential.password:
            # ``admin set`` only echoes the username
            credential = Credential(username=credential.username, password=password)
        logger.info("Admin password set for %r", credential.username)
        return credential
