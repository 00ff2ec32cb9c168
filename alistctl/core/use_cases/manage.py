"""
Management use cases — status, service control and password reset
for an existing install.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from alistctl.core.errors import NotInstalled
from alistctl.core.execution.subprocess_runner import Runner, run_command
from alistctl.core.models.config import AlistctlConfig
from alistctl.core.models.install import Credential
from alistctl.core.services.credentials import CredentialManager
from alistctl.core.services.install_paths import read_installed_path
from alistctl.core.services.systemd_service import ServiceRegistrar

logger = logging.getLogger(__name__)


def registrar_for(config: AlistctlConfig, run: Runner = run_command) -> ServiceRegistrar:
    return ServiceRegistrar(
        config.service_name,
        config.unit_dir,
        description=config.description,
        run=run,
    )


def installed_path(config: AlistctlConfig) -> Path:
    """Install directory of the existing install (unit file, else default)."""
    return read_installed_path(
        config.unit_path, config.default_install_path, config.binary_name
    )


def require_installed(config: AlistctlConfig) -> Path:
    """Return the install directory, or raise NotInstalled."""
    install_dir = installed_path(config)
    if not (install_dir / config.binary_name).is_file():
        raise NotInstalled(f"{config.service_name} is not installed at {install_dir}")
    return install_dir


@dataclass
class StatusResult:
    """Installed/running summary."""

    install_dir: Path
    installed: bool
    state: str = "stopped"

    def to_dict(self) -> dict:
        return {
            "install_dir": str(self.install_dir),
            "installed": self.installed,
            "state": self.state,
        }


def get_status(config: AlistctlConfig, registrar: ServiceRegistrar) -> StatusResult:
    install_dir = require_installed(config)
    state = registrar.status()
    logger.info("Status: %s", state)
    return StatusResult(install_dir=install_dir, installed=True, state=state)


def start_service(config: AlistctlConfig, registrar: ServiceRegistrar) -> None:
    require_installed(config)
    registrar.start()


def stop_service(config: AlistctlConfig, registrar: ServiceRegistrar) -> bool:
    require_installed(config)
    return registrar.stop()


def restart_service(config: AlistctlConfig, registrar: ServiceRegistrar) -> None:
    require_installed(config)
    registrar.restart()


def reset_password(
    config: AlistctlConfig,
    registrar: ServiceRegistrar,
    new_password: str | None = None,
    *,
    run: Runner = run_command,
) -> Credential:
    """Random password when ``new_password`` is None, else set it.

    The service is stopped around the admin call and restarted after.
    """
    install_dir = require_installed(config)
    manager = CredentialManager(
        install_dir, config.binary_name, registrar=registrar, run=run
    )
    if new_password is None:
        return manager.random_credential()
    return manager.set_credential(new_password)
