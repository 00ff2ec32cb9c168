"""
Install, update and uninstall use cases.

Fatal problems raise ``AlistctlError`` subclasses; non-fatal ones are
collected as ``warnings`` on the result.  The caller (CLI or menu)
decides how to present both.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from alistctl.core.errors import (
    AlistctlError,
    AlreadyInstalled,
    BinaryMissing,
    CliInstallError,
    DownloadFailed,
    ExtractFailed,
    ServiceControlError,
)
from alistctl.core.execution.subprocess_runner import Runner, run_command
from alistctl.core.models.config import AlistctlConfig
from alistctl.core.models.install import CliLinkage, Credential, InstallTarget
from alistctl.core.services.archive_install import (
    install_archive,
    make_executable,
    reset_directory,
)
from alistctl.core.services.cli_install import current_script, install_cli, is_root, remove_cli
from alistctl.core.services.credentials import CredentialManager
from alistctl.core.services.download import download
from alistctl.core.services.host_probes import check_port_free
from alistctl.core.services.install_paths import normalize_install_path, prepare_install_parent
from alistctl.core.services.platform_detect import build_install_target
from alistctl.core.services.systemd_service import ServiceRegistrar
from alistctl.core.use_cases.manage import require_installed

logger = logging.getLogger(__name__)


def _download_options(config: AlistctlConfig) -> dict:
    return config.download.model_dump()


def _linkage(config: AlistctlConfig) -> CliLinkage:
    return CliLinkage(manager_path=config.manager_path, command_link=config.command_link)


# ── Install ─────────────────────────────────────────────────────────


@dataclass
class InstallResult:
    """Outcome of a fresh install."""

    target: InstallTarget
    credential: Credential = field(default_factory=Credential)
    cli_installed: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def config_file(self) -> Path:
        return self.target.install_dir / "data" / "config.json"


def resolve_fresh_install_dir(config: AlistctlConfig, path: str | None) -> Path:
    """Install directory for a fresh install.

    An explicit ``path`` is normalised to end in ``install_subdir`` and
    its parent is created/checked.  Otherwise the configured default.
    """
    if not path:
        install_dir = config.default_install_path
    else:
        install_dir = normalize_install_path(path, config.install_subdir)
    prepare_install_parent(install_dir)
    logger.info("Install path set to %s", install_dir)
    return install_dir


def run_install(
    config: AlistctlConfig,
    registrar: ServiceRegistrar,
    *,
    path: str | None = None,
    proxy: str | None = None,
    machine: str | None = None,
    downloader: Callable[..., Path] = download,
    cli_source: Path | None = None,
    check_root: Callable[[], bool] = is_root,
    check_port: bool = True,
    run: Runner = run_command,
) -> InstallResult:
    """Install the release, register the service and start it.

    Raises:
        AlreadyInstalled: The binary already exists at the target.
        PortInUse, PathUnwritable, UnsupportedArchitecture,
        DownloadFailed, ExtractFailed, BinaryMissing,
        RegistrationFailed, ServiceControlError.
    """
    install_dir = resolve_fresh_install_dir(config, path)
    target = build_install_target(config, install_dir=install_dir, machine=machine, proxy=proxy)

    binary = install_dir / config.binary_name
    if binary.is_file():
        raise AlreadyInstalled(
            f"Already installed at {install_dir}. "
            "Use 'alistctl update' to update, or choose another path."
        )

    if check_port:
        check_port_free(config.port)

    reset_directory(install_dir)
    install_archive(
        target.download_url,
        install_dir,
        config.binary_name,
        downloader=downloader,
        download_options=_download_options(config),
    )

    result = InstallResult(target=target)
    result.credential = CredentialManager(
        install_dir, config.binary_name, run=run
    ).mint_initial_credential()

    registrar.register(install_dir, config.binary_name)

    try:
        install_cli(cli_source or current_script(), _linkage(config), check_root=check_root)
        result.cli_installed = True
    except (PermissionError, CliInstallError) as e:
        logger.warning("Command line tool not installed: %s", e)
        result.warnings.append(
            f"Command line tool install failed ({e}); the service is unaffected"
        )

    registrar.restart()
    logger.info("Install completed at %s", install_dir)
    return result


# ── Update ──────────────────────────────────────────────────────────


@dataclass
class UpdateResult:
    """Outcome of a successful update."""

    target: InstallTarget
    warnings: list[str] = field(default_factory=list)


def _restore_backup(backup: Path, binary: Path, registrar: ServiceRegistrar) -> None:
    shutil.copy2(backup, binary)
    make_executable(binary)
    logger.warning("Restored previous binary from %s", backup)
    try:
        registrar.start()
    except ServiceControlError as e:
        logger.error("Service did not come back after rollback: %s", e)


def run_update(
    config: AlistctlConfig,
    registrar: ServiceRegistrar,
    *,
    proxy: str | None = None,
    machine: str | None = None,
    downloader: Callable[..., Path] = download,
    tmp_dir: Path | None = None,
) -> UpdateResult:
    """Replace the installed binary with the latest release.

    The current binary is backed up first.  If the download or
    extraction fails, the backup is restored and the service started
    again before the error propagates.

    Raises:
        NotInstalled, UnsupportedArchitecture, DownloadFailed,
        ExtractFailed, BinaryMissing, ServiceControlError.
    """
    install_dir = require_installed(config)
    target = build_install_target(config, install_dir=install_dir, machine=machine, proxy=proxy)
    binary = install_dir / config.binary_name
    result = UpdateResult(target=target)

    if not registrar.stop():
        result.warnings.append("Failed to stop service, continuing with update")

    backup_dir = Path(tmp_dir) if tmp_dir is not None else Path(tempfile.gettempdir())
    backup = backup_dir / f"{config.binary_name}.bak"
    try:
        backup_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(binary, backup)
    except OSError as e:
        try:
            registrar.start()
        except ServiceControlError as start_error:
            logger.error("Service did not come back after failed backup: %s", start_error)
        raise AlistctlError(f"Cannot back up existing binary {binary}: {e}") from e
    logger.info("Backed up %s → %s", binary, backup)

    try:
        install_archive(
            target.download_url,
            install_dir,
            config.binary_name,
            downloader=downloader,
            download_options=_download_options(config),
            tmp_dir=tmp_dir,
            reset_on_missing=False,
        )
    except (DownloadFailed, ExtractFailed, BinaryMissing):
        logger.error("Update failed, rolling back")
        _restore_backup(backup, binary, registrar)
        backup.unlink(missing_ok=True)
        raise

    backup.unlink(missing_ok=True)
    registrar.restart()
    logger.info("Update completed at %s", install_dir)
    return result


# ── Uninstall ───────────────────────────────────────────────────────


@dataclass
class UninstallResult:
    """Outcome of an uninstall."""

    install_dir: Path
    warnings: list[str] = field(default_factory=list)


def run_uninstall(config: AlistctlConfig, registrar: ServiceRegistrar) -> UninstallResult:
    """Stop, disable and remove the service, then delete the install.

    Raises:
        NotInstalled: Nothing to uninstall.
    """
    install_dir = require_installed(config)
    result = UninstallResult(install_dir=install_dir)

    result.warnings.extend(registrar.unregister())

    try:
        shutil.rmtree(install_dir)
    except OSError as e:
        logger.warning("Cannot remove %s: %s", install_dir, e)
        result.warnings.append(f"Failed to remove {install_dir}")

    leftovers = remove_cli(_linkage(config))
    if leftovers:
        result.warnings.append(
            "Failed to remove command line tool, delete manually: " + ", ".join(leftovers)
        )

    logger.info("Uninstall completed")
    return result
