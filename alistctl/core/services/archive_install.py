"""
Archive installation — download, unpack and verify a release tarball.

Extraction is staged in a scratch directory, so a corrupt archive never
leaves a half-written install behind.  The scratch directory (holding
the downloaded archive too) is removed on every path.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import sys
import tarfile
import tempfile
from pathlib import Path
from typing import Callable

from alistctl.core.errors import BinaryMissing, ExtractFailed
from alistctl.core.services.download import download

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "alist-backup.tar.gz"


def _safe_extractall(tf: tarfile.TarFile, dest_dir: Path) -> None:
    """Extract, refusing members that would land outside ``dest_dir``."""
    if sys.version_info >= (3, 12):
        tf.extractall(dest_dir, filter="data")
        return

    abs_dest = os.path.realpath(dest_dir)
    for member in tf.getmembers():
        abs_member = os.path.realpath(os.path.join(dest_dir, member.name))
        if abs_member != abs_dest and not abs_member.startswith(abs_dest + os.sep):
            raise tarfile.TarError(f"Refusing to extract {member.name!r}: path traversal")
    tf.extractall(dest_dir)


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def reset_directory(path: Path) -> None:
    """Empty ``path``, leaving the directory itself in place."""
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)


def make_executable(path: Path) -> None:
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def install_archive(
    url: str,
    install_dir: Path,
    binary_name: str = "alist",
    *,
    downloader: Callable[..., Path] = download,
    download_options: dict | None = None,
    tmp_dir: Path | None = None,
    reset_on_missing: bool = True,
) -> Path:
    """Fetch the release at ``url`` and install it into ``install_dir``.

    Args:
        url: Release archive URL (.tar.gz).
        install_dir: Target directory; created if missing.
        binary_name: Executable expected at the archive root.
        downloader: Retrying download function.
        download_options: Extra keyword args for ``downloader``
            (max_retries, initial_backoff, connect_timeout).
        tmp_dir: Parent for the scratch directory (default: system temp).
        reset_on_missing: Empty ``install_dir`` when the archive lacks
            the binary.  Updates pass False to keep the existing data.

    Returns:
        Path to the installed executable.

    Raises:
        DownloadFailed: Retries exhausted (from ``downloader``).
        ExtractFailed: Archive could not be read; ``install_dir`` untouched.
        BinaryMissing: Archive read fine but has no ``binary_name``.
    """
    install_dir = Path(install_dir)
    install_dir.mkdir(parents=True, exist_ok=True)
    if tmp_dir is not None:
        Path(tmp_dir).mkdir(parents=True, exist_ok=True)

    with tempfile.TemporaryDirectory(prefix="alistctl-", dir=tmp_dir) as work:
        archive = Path(work) / ARCHIVE_NAME
        downloader(url, archive, **(download_options or {}))

        staging = Path(work) / "staging"
        staging.mkdir()
        try:
            with tarfile.open(archive, "r:gz") as tf:
                _safe_extractall(tf, staging)
        except (tarfile.TarError, OSError, EOFError) as e:
            logger.error("Failed to extract %s: %s", archive, e)
            raise ExtractFailed(f"Failed to extract archive from {url}: {e}") from e

        if not (staging / binary_name).is_file():
            contents = sorted(p.name for p in staging.iterdir())
            logger.error("Binary %r not in archive (contents: %s)", binary_name, contents)
            if reset_on_missing:
                reset_directory(install_dir)
            raise BinaryMissing(
                f"Binary '{binary_name}' not found after extraction "
                f"(archive contents: {', '.join(contents) or 'nothing'})"
            )

        for item in staging.iterdir():
            target = install_dir / item.name
            if target.exists() or target.is_symlink():
                _remove(target)
            shutil.move(str(item), str(target))

    binary = install_dir / binary_name
    make_executable(binary)
    logger.info("Installed %s", binary)
    return binary
