"""
Install the manager as a system command.

Copies the running entry script to ``manager_path`` and points
``command_link`` at it.  A failure after the copy removes the copy so
a half-installed command is never left behind.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Callable

from alistctl.core.errors import CliInstallError
from alistctl.core.models.install import CliLinkage

logger = logging.getLogger(__name__)


def is_root() -> bool:
    return os.geteuid() == 0


def current_script() -> Path:
    """Path of the running ``alistctl`` entry script."""
    return Path(sys.argv[0]).resolve()


def install_cli(
    source: Path,
    linkage: CliLinkage,
    *,
    check_root: Callable[[], bool] = is_root,
) -> CliLinkage:
    """Copy ``source`` to the manager path and symlink the command.

    Raises:
        PermissionError: Not running as root.
        CliInstallError: Source missing, copy failed, or a later step
            failed (the copy is rolled back).
    """
    if not check_root():
        raise PermissionError("Installing the command line tool requires root privileges")

    source = Path(source)
    if not source.is_file():
        raise CliInstallError(f"Source script not found: {source}")

    manager = linkage.manager_path
    link = linkage.command_link

    try:
        manager.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, manager)
    except OSError as e:
        raise CliInstallError(f"Cannot copy {source} to {manager}: {e}") from e

    try:
        manager.chmod(0o755)
        link.parent.mkdir(parents=True, exist_ok=True)
        if link.is_symlink() or link.exists():
            link.unlink()
        link.symlink_to(manager)
    except OSError as e:
        manager.unlink(missing_ok=True)
        raise CliInstallError(f"Cannot create command link {link}: {e}") from e

    logger.info("Command installed: %s → %s", link, manager)
    return linkage


def remove_cli(linkage: CliLinkage) -> list[str]:
    """Remove the command link and manager copy.

    Returns:
        Paths that could not be removed (empty on success).
    """
    leftovers: list[str] = []
    for path in (linkage.command_link, linkage.manager_path):
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Cannot remove %s: %s", path, e)
            leftovers.append(str(path))
    return leftovers
