"""
Core subprocess runner.

The SINGLE PLACE where ``subprocess.run`` is called.  systemctl
control and the binary's admin subcommands all go through here so
logging and error shaping stay in one spot.
"""

from __future__ import annotations

import logging
import subprocess
import time
from typing import Any, Callable

logger = logging.getLogger(__name__)

# Signature shared by the real runner and test doubles
Runner = Callable[..., dict[str, Any]]


def run_command(
    cmd: list[str],
    *,
    timeout: int = 120,
    cwd: str | None = None,
    merge_stderr: bool = False,
    redact: bool = False,
) -> dict[str, Any]:
    """Run a command and capture its output.

    Args:
        cmd: Command list for ``subprocess.run()``.
        timeout: Seconds before ``TimeoutExpired``.
        cwd: Working directory for the command.
        merge_stderr: Interleave stderr into stdout (the binary's admin
            subcommands print credentials on either stream).
        redact: Log only the program name, not its arguments.

    Returns:
        ``{"ok": True, "stdout": "...", "returncode": 0, "elapsed_ms": N}``
        on success, ``{"ok": False, "error": "...", ...}`` on failure.
    """
    shown = cmd[0] if redact else " ".join(cmd)
    logger.debug("Executing: %s (cwd=%s)", shown, cwd)

    start = time.monotonic()
    try:
        result = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
            text=True,
            timeout=timeout,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired:
        return {"ok": False, "returncode": None, "error": f"Command timed out ({timeout}s)"}
    except OSError as e:
        logger.debug("Cannot execute %s: %s", shown, e)
        return {"ok": False, "returncode": None, "error": str(e), "stdout": "", "stderr": ""}

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = result.stdout or ""
    stderr = result.stderr or ""

    if result.returncode == 0:
        return {
            "ok": True,
            "returncode": 0,
            "stdout": stdout,
            "stderr": stderr,
            "elapsed_ms": elapsed_ms,
        }

    logger.debug("%s exited with %d", shown, result.returncode)
    return {
        "ok": False,
        "returncode": result.returncode,
        "error": stderr.strip()[-2000:] or f"Command failed (exit {result.returncode})",
        "stdout": stdout,
        "stderr": stderr,
        "elapsed_ms": elapsed_ms,
    }
