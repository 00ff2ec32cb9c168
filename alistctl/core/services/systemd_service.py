"""
systemd service registration and control.

Unit lifecycle:

    absent ──register──▶ enabled/stopped ──start──▶ running
      ▲                        ▲                      │
      └──────unregister────────┴────────stop──────────┘

``stop`` failures are warnings (the unit may already be down);
``start``, ``restart`` and ``enable`` failures are fatal.
"""

from __future__ import annotations

import logging
from pathlib import Path

from alistctl.core.errors import RegistrationFailed, ServiceControlError
from alistctl.core.execution.subprocess_runner import Runner, run_command
from alistctl.core.models.install import ServiceUnit

logger = logging.getLogger(__name__)


def detect_init_system(root: Path = Path("/")) -> str:
    """Running init system: ``systemd``, ``openrc``, ``sysvinit`` or ``unknown``."""
    # /run/systemd/system only exists while systemd is PID 1
    if (root / "run" / "systemd" / "system").is_dir():
        return "systemd"
    if (root / "run" / "openrc").is_dir():
        return "openrc"
    if (root / "etc" / "init.d").is_dir():
        return "sysvinit"
    return "unknown"


class ServiceRegistrar:
    """Register and drive one systemd unit."""

    def __init__(
        self,
        name: str,
        unit_dir: Path = Path("/etc/systemd/system"),
        *,
        description: str = "",
        run: Runner = run_command,
    ):
        self.name = name
        self.unit_dir = Path(unit_dir)
        self.description = description
        self._run = run

    @property
    def unit_path(self) -> Path:
        return self.unit_dir / f"{self.name}.service"

    def is_registered(self) -> bool:
        return self.unit_path.is_file()

    def _systemctl(self, *args: str) -> dict:
        return self._run(["systemctl", *args], timeout=60)

    # ── Registration ─────────────────────────────────────────────

    def build_unit(self, install_dir: Path, binary_name: str) -> ServiceUnit:
        return ServiceUnit(
            name=self.name,
            description=self.description,
            working_directory=install_dir,
            exec_start=f"{install_dir / binary_name} server",
        )

    def register(self, install_dir: Path, binary_name: str = "alist") -> ServiceUnit:
        """Write the unit file, reload systemd and enable the unit.

        Raises:
            RegistrationFailed: Unit file not writable or enable failed.
        """
        unit = self.build_unit(Path(install_dir), binary_name)
        try:
            self.unit_dir.mkdir(parents=True, exist_ok=True)
            self.unit_path.write_text(unit.render(), encoding="utf-8")
        except OSError as e:
            raise RegistrationFailed(f"Cannot write {self.unit_path}: {e}") from e
        logger.info("Wrote unit file %s", self.unit_path)

        reload = self._systemctl("daemon-reload")
        if not reload["ok"]:
            logger.warning("systemctl daemon-reload failed: %s", reload.get("error"))

        enable = self._systemctl("enable", self.name)
        if not enable["ok"]:
            raise RegistrationFailed(
                f"Cannot enable {self.name} service: {enable.get('error', 'unknown error')}"
            )
        logger.info("Service %s enabled", self.name)
        return unit

    def unregister(self) -> list[str]:
        """Stop, disable and remove the unit, in that order.

        Returns:
            Warnings for steps that failed (none are fatal).
        """
        warnings: list[str] = []
        if not self.stop():
            warnings.append(f"Failed to stop {self.name}")

        disable = self._systemctl("disable", self.name)
        if not disable["ok"]:
            logger.warning("Failed to disable %s: %s", self.name, disable.get("error"))
            warnings.append(f"Failed to disable {self.name}")

        try:
            self.unit_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Cannot remove %s: %s", self.unit_path, e)
            warnings.append(f"Failed to remove {self.unit_path}")

        self._systemctl("daemon-reload")
        logger.info("Service %s unregistered", self.name)
        return warnings

    # ── Control verbs ────────────────────────────────────────────

    def start(self) -> None:
        result = self._systemctl("start", self.name)
        if not result["ok"]:
            raise ServiceControlError(
                f"Cannot start {self.name} service: {result.get('error', 'unknown error')}"
            )
        logger.info("Service %s started", self.name)

    def restart(self) -> None:
        result = self._systemctl("restart", self.name)
        if not result["ok"]:
            raise ServiceControlError(
                f"Cannot restart {self.name} service: {result.get('error', 'unknown error')}"
            )
        logger.info("Service %s restarted", self.name)

    def stop(self) -> bool:
        """Stop the unit.  Returns False (with a warning) on failure."""
        result = self._systemctl("stop", self.name)
        if not result["ok"]:
            logger.warning("Failed to stop %s: %s", self.name, result.get("error"))
            return False
        logger.info("Service %s stopped", self.name)
        return True

    def status(self) -> str:
        """``"running"`` when ``systemctl is-active`` succeeds, else ``"stopped"``."""
        result = self._systemctl("is-active", "--quiet", self.name)
        return "running" if result["ok"] else "stopped"

    def details(self) -> dict:
        """Active, sub and load state via ``systemctl show``."""
        props: dict[str, str] = {}
        for prop in ("ActiveState", "SubState", "LoadState"):
            r = self._systemctl("show", self.name, f"--property={prop}")
            if r["ok"]:
                key, _, val = r["stdout"].strip().partition("=")
                props[key.lower()] = val

        return {
            "service": self.name,
            "active": props.get("activestate") == "active",
            "state": props.get("activestate", "unknown"),
            "sub_state": props.get("substate", "unknown"),
            "loaded": props.get("loadstate") == "loaded",
        }
