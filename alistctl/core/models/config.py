"""
Installer configuration — every tunable constant in one validated model.

Loaded from YAML by ``alistctl.core.config.loader``.  Every field has a
default so an empty (or absent) config file yields a working setup for
the stock alist-backup release.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

_RELEASE_BASE = "https://github.com/guihuatu2022/alist-backup/releases/download/alist-backup"


class DownloadSettings(BaseModel):
    """Retry policy for release downloads."""

    max_retries: int = Field(default=3, ge=1)
    initial_backoff: float = Field(default=5.0, ge=0)
    connect_timeout: float = Field(default=10.0, gt=0)


class AlistctlConfig(BaseModel):
    """Root configuration model."""

    # ── Identity ─────────────────────────────────────────────────
    service_name: str = "alist-backup"
    description: str = "Alist Backup Service"
    binary_name: str = "alist"

    # ── Locations ────────────────────────────────────────────────
    install_subdir: str = "alist-backup"
    default_install_path: Path = Path("/opt/alist-backup")
    unit_dir: Path = Path("/etc/systemd/system")
    manager_path: Path = Path("/usr/local/sbin/alist-backup-manager")
    command_link: Path = Path("/usr/local/bin/alist-backup")
    log_file: str | None = "/var/log/alist-backup-install.log"

    # ── Release assets ───────────────────────────────────────────
    download_urls: dict[str, str] = Field(
        default_factory=lambda: {
            "amd64": f"{_RELEASE_BASE}/alist-linux-amd64.tar.gz",
            "arm64": f"{_RELEASE_BASE}/alist-linux-arm64.tar.gz",
        }
    )
    download: DownloadSettings = Field(default_factory=DownloadSettings)

    # ── Runtime ──────────────────────────────────────────────────
    port: int = Field(default=5244, ge=1, le=65535)

    @property
    def unit_path(self) -> Path:
        return self.unit_dir / f"{self.service_name}.service"
