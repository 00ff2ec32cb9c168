"""
Host probes — privilege, required commands, port availability and
the addresses shown in the post-install banner.
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
import socket
import urllib.request

from alistctl.core.errors import MissingDependency, PortInUse, PrivilegeError

logger = logging.getLogger(__name__)

PUBLIC_IP_URL = "https://api.ipify.org"


def require_root(action: str) -> None:
    """Raise PrivilegeError unless running as root."""
    if os.geteuid() != 0:
        raise PrivilegeError(
            f"Root privileges required for '{action}'. Retry with: sudo alistctl {action}"
        )


def require_commands(commands: list[str]) -> None:
    """Raise MissingDependency for the first command not on PATH."""
    for name in commands:
        if shutil.which(name) is None:
            raise MissingDependency(f"'{name}' not found, please install it first")


def port_in_use(port: int, host: str = "0.0.0.0") -> bool:
    """True if a TCP listener already owns ``port``."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind((host, port))
    except OSError as e:
        return e.errno == errno.EADDRINUSE
    finally:
        sock.close()
    return False


def check_port_free(port: int) -> None:
    if port_in_use(port):
        raise PortInUse(
            f"Port {port} is already in use. "
            f"Find the owning process with: sudo ss -tlnp | grep {port}"
        )


def lan_address() -> str:
    """Primary outbound IPv4 address, or ``"unknown"``."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # No packet is sent; connect() only selects a route
        sock.connect(("8.8.8.8", 80))
        return sock.getsockname()[0]
    except OSError:
        return "unknown"
    finally:
        sock.close()


def public_address(timeout: float = 5.0) -> str:
    """Public IPv4 address as seen by an echo service, or ``"unknown"``."""
    try:
        req = urllib.request.Request(PUBLIC_IP_URL, headers={"User-Agent": "alistctl"})
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return resp.read().decode("ascii", "replace").strip() or "unknown"
    except OSError as e:
        logger.debug("Public address lookup failed: %s", e)
        return "unknown"
