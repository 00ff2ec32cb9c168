"""
Shared test fixtures and configuration.

Nothing here touches the real host: systemctl and the alist binary are
replaced by ``FakeHost``, downloads by a local archive copier.
"""

import io
import shutil
import tarfile
from pathlib import Path

import pytest

from alistctl.core.models.config import AlistctlConfig
from alistctl.core.services.systemd_service import ServiceRegistrar


class FakeHost:
    """Stand-in for ``run_command``: a tiny systemd plus the admin subcommand."""

    def __init__(self, admin_output: str = "username: admin\npassword: s3cret\n"):
        self.admin_output = admin_output
        self.enabled = False
        self.active = False
        self.fail: set[str] = set()
        self.calls: list[list[str]] = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        if cmd[0] == "systemctl":
            return self._systemctl(cmd[1], cmd[2:])
        if len(cmd) > 1 and cmd[1] == "admin":
            if "admin" in self.fail:
                return {"ok": False, "returncode": 1, "stdout": self.admin_output, "error": "boom"}
            return {"ok": True, "returncode": 0, "stdout": self.admin_output}
        return {"ok": False, "returncode": 127, "error": f"unknown command {cmd[0]}"}

    def _systemctl(self, verb, args):
        if verb in self.fail:
            return {"ok": False, "returncode": 1, "error": f"{verb} failed", "stdout": ""}
        if verb == "enable":
            self.enabled = True
        elif verb == "disable":
            self.enabled = False
        elif verb in ("start", "restart"):
            self.active = True
        elif verb == "stop":
            self.active = False
        elif verb == "is-active":
            return {"ok": self.active, "returncode": 0 if self.active else 3, "stdout": ""}
        elif verb == "show":
            prop = args[-1].split("=", 1)[1]
            value = {
                "ActiveState": "active" if self.active else "inactive",
                "SubState": "running" if self.active else "dead",
                "LoadState": "loaded",
            }[prop]
            return {"ok": True, "returncode": 0, "stdout": f"{prop}={value}\n"}
        return {"ok": True, "returncode": 0, "stdout": ""}

    def verbs(self) -> list[str]:
        return [c[1] for c in self.calls if c[0] == "systemctl"]


def make_release(path: Path, files: dict[str, bytes]) -> Path:
    """Write a .tar.gz containing ``files`` (name → content)."""
    with tarfile.open(path, "w:gz") as tf:
        for name, data in files.items():
            info = tarfile.TarInfo(name=name)
            info.size = len(data)
            info.mode = 0o644
            tf.addfile(info, io.BytesIO(data))
    return path


def copying_downloader(source: Path):
    """Downloader double that copies ``source`` to the destination."""
    calls = []

    def _download(url, dest, **kwargs):
        calls.append(url)
        shutil.copyfile(source, dest)
        return Path(dest)

    _download.calls = calls
    return _download


@pytest.fixture
def fake_host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def config(tmp_path: Path) -> AlistctlConfig:
    """Config with every host path redirected into tmp_path."""
    return AlistctlConfig(
        default_install_path=tmp_path / "opt" / "alist-backup",
        unit_dir=tmp_path / "systemd",
        manager_path=tmp_path / "sbin" / "alist-backup-manager",
        command_link=tmp_path / "bin" / "alist-backup",
        log_file=None,
    )


@pytest.fixture
def registrar(config: AlistctlConfig, fake_host: FakeHost) -> ServiceRegistrar:
    return ServiceRegistrar(config.service_name, config.unit_dir, run=fake_host)


@pytest.fixture
def release(tmp_path: Path) -> Path:
    """A valid release archive holding the ``alist`` binary."""
    return make_release(tmp_path / "release.tar.gz", {"alist": b"#!/bin/sh\necho new\n"})
