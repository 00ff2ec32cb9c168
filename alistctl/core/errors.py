"""
Error hierarchy — every fatal condition the installer can hit.

Core services raise these.  The CLI layer (``ui.cli.base``) reports
them and exits with the error's ``exit_code``.  Warnings are never
raised; they are logged and the operation continues.
"""

from __future__ import annotations


class AlistctlError(Exception):
    """Base error with a user-facing message."""

    exit_code = 1


class UnsupportedArchitecture(AlistctlError):
    """Host CPU architecture has no matching release asset."""

    def __init__(self, machine: str):
        self.machine = machine
        super().__init__(
            f"Unsupported architecture: {machine!r} (only x86_64 and aarch64 are supported)"
        )


class PathUnwritable(AlistctlError):
    """Install parent directory cannot be created or written."""


class MissingDependency(AlistctlError):
    """A required host command is not available."""


class PrivilegeError(AlistctlError):
    """Operation requires root privileges."""


class PortInUse(AlistctlError):
    """The service port is already bound by another process."""


class AlreadyInstalled(AlistctlError):
    """Target directory already holds the executable."""

    exit_code = 0


class NotInstalled(AlistctlError):
    """No installation found where one was expected."""


class DownloadFailed(AlistctlError):
    """Download retries exhausted without a non-empty file."""


class ExtractFailed(AlistctlError):
    """Archive could not be decoded or unpacked."""


class BinaryMissing(AlistctlError):
    """Archive unpacked but did not contain the expected executable."""


class RegistrationFailed(AlistctlError):
    """Unit file could not be written or the unit could not be enabled."""


class ServiceControlError(AlistctlError):
    """systemctl start/restart failed."""


class EmptyPasswordError(AlistctlError):
    """A new password must not be empty."""

    def __init__(self) -> None:
        super().__init__("Password cannot be empty")


class CliInstallError(AlistctlError):
    """Manager script could not be installed as a system command."""
