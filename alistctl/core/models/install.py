"""
Records passed between the install steps.

None of these are persisted by alistctl itself except ``ServiceUnit``,
which is rendered into a systemd unit file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict

ArchTag = Literal["amd64", "arm64"]


class InstallTarget(BaseModel):
    """What to fetch and where to put it.  Immutable once resolved."""

    model_config = ConfigDict(frozen=True)

    arch: ArchTag
    install_dir: Path
    download_url: str


class ServiceUnit(BaseModel):
    """A systemd service description for the installed binary."""

    name: str
    description: str = ""
    working_directory: Path
    exec_start: str
    restart: str = "on-failure"
    restart_sec: int = 5

    def render(self) -> str:
        """Render as unit file text."""
        return (
            "[Unit]\n"
            f"Description={self.description or self.name}\n"
            "Wants=network.target\n"
            "After=network.target\n"
            "\n"
            "[Service]\n"
            "Type=simple\n"
            f"WorkingDirectory={self.working_directory}\n"
            f"ExecStart={self.exec_start}\n"
            "KillMode=process\n"
            f"Restart={self.restart}\n"
            f"RestartSec={self.restart_sec}\n"
            "\n"
            "[Install]\n"
            "WantedBy=multi-user.target\n"
        )


class Credential(BaseModel):
    """Login pair reported by the binary's admin subcommand."""

    username: str = ""
    password: str = ""

    @property
    def complete(self) -> bool:
        """Both fields were found in the binary's output."""
        return bool(self.username and self.password)


class CliLinkage(BaseModel):
    """Where the manager command is installed."""

    manager_path: Path
    command_link: Path
