"""
Map the host machine to a release asset tag.
"""

from __future__ import annotations

import logging
import platform
from pathlib import Path

from alistctl.core.errors import UnsupportedArchitecture
from alistctl.core.models.config import AlistctlConfig
from alistctl.core.models.install import ArchTag, InstallTarget

logger = logging.getLogger(__name__)

_ARCH_MAP: dict[str, ArchTag] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
}


def host_machine() -> str:
    """Return the host's raw machine string (``uname -m``)."""
    return platform.machine()


def detect_arch(machine: str) -> ArchTag:
    """Map a machine string to a supported architecture tag.

    Raises:
        UnsupportedArchitecture: For anything other than x86_64/aarch64.
    """
    tag = _ARCH_MAP.get(machine.strip().lower())
    if tag is None:
        raise UnsupportedArchitecture(machine)
    return tag


def apply_proxy(url: str, proxy: str | None) -> str:
    """Prefix a download URL with a mirror proxy.

    ``https://ghproxy.example.com/`` + ``https://github.com/x`` becomes
    ``https://ghproxy.example.com/github.com/x``.
    """
    if not proxy:
        return url
    bare = url.split("://", 1)[1] if "://" in url else url
    return f"{proxy}{bare}"


def build_install_target(
    config: AlistctlConfig,
    *,
    install_dir: Path,
    machine: str | None = None,
    proxy: str | None = None,
) -> InstallTarget:
    """Resolve architecture and download URL into an InstallTarget."""
    raw = machine if machine is not None else host_machine()
    arch = detect_arch(raw)
    url = apply_proxy(config.download_urls[arch], proxy)
    logger.info("Architecture: %s (%s), download URL: %s", arch, raw, url)
    return InstallTarget(arch=arch, install_dir=install_dir, download_url=url)
