"""
Install path resolution.

Fresh installs take a user-supplied path (normalised to end in the
install subdirectory).  Update, uninstall and the menu instead look up
where the previous install lives by reading the registered unit's
``WorkingDirectory=``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable

from alistctl.core.errors import PathUnwritable

logger = logging.getLogger(__name__)


def normalize_install_path(raw: str, suffix: str = "alist-backup") -> Path:
    """Strip a trailing separator and append ``suffix`` if missing.

    Relative paths are made absolute against the current directory;
    systemd rejects relative ``WorkingDirectory=`` and ``ExecStart=``.
    """
    trimmed = raw.rstrip("/") or "/"
    path = Path(trimmed)
    if path.name != suffix:
        path = path / suffix
    return path.absolute()


def prepare_install_parent(install_dir: Path) -> Path:
    """Ensure the parent of ``install_dir`` exists and is writable.

    Raises:
        PathUnwritable: If the parent cannot be created or written to.
    """
    parent = install_dir.parent
    if not parent.is_dir():
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PathUnwritable(f"Cannot create directory {parent}: {e}") from e
        logger.info("Created directory %s", parent)

    if not os.access(parent, os.W_OK):
        raise PathUnwritable(f"Directory {parent} is not writable")
    return parent


def parse_working_directory(unit_contents: str) -> str | None:
    """Return the ``WorkingDirectory=`` value from unit file text."""
    for line in unit_contents.splitlines():
        key, sep, value = line.strip().partition("=")
        if sep and key.strip() == "WorkingDirectory":
            return value.strip() or None
    return None


def resolve_install_path(
    unit_contents: str | None,
    default: Path,
    binary_name: str = "alist",
    exists: Callable[[Path], bool] = Path.is_file,
) -> Path:
    """Find the install directory of a previous install.

    Uses the unit's working directory when it holds the binary, else
    ``default``.
    """
    if unit_contents:
        declared = parse_working_directory(unit_contents)
        if declared and exists(Path(declared) / binary_name):
            return Path(declared)
    return default


def read_installed_path(unit_path: Path, default: Path, binary_name: str = "alist") -> Path:
    """Read ``unit_path`` (if present) and resolve the install directory."""
    contents = None
    try:
        contents = unit_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("No unit file at %s", unit_path)
    except OSError as e:
        logger.warning("Cannot read %s: %s", unit_path, e)

    path = resolve_install_path(contents, default, binary_name)
    logger.debug("Resolved install path: %s", path)
    return path
