"""
Process-wide logging for alistctl.

``setup_logging`` runs once from ``main.py``; modules only ever call
``logging.getLogger(__name__)``.

Console verbosity comes from the CLI flags, then ``ALISTCTL_LOG_LEVEL``,
then WARNING.  The install log (``ALISTCTL_LOG_FILE``, else the configured
``log_file``) keeps a DEBUG-level history of every run so a failed
install can be diagnosed after the fact.
"""

from __future__ import annotations

import logging
import sys

_CONSOLE_FORMATS: list[tuple[int, str, str | None]] = [
    # (max level, format, datefmt), first match wins
    (logging.DEBUG, "%(asctime)s %(levelname)s %(name)s:%(lineno)d %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
]
_CONSOLE_DEFAULT = "%(message)s"

_INSTALL_LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
_INSTALL_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = _CONSOLE_DEFAULT, None
    for max_level, candidate, candidate_datefmt in _CONSOLE_FORMATS:
        if level <= max_level:
            fmt, datefmt = candidate, candidate_datefmt
            break
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _install_log_handler(path: str, level: int) -> logging.Handler:
    """Append-mode file handler; raises OSError when ``path`` is unwritable."""
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_INSTALL_LOG_FORMAT, datefmt=_INSTALL_LOG_DATEFMT))
    return handler


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = "DEBUG",
) -> bool:
    """Replace the root logger's handlers with console (+ install log).

    Args:
        level: Console level name.
        log_file: Install log path; empty or None disables it.
        log_file_level: Install log level name (defaults to ``level``
            when None).

    Returns:
        Whether the install log is attached.  It normally lives in
        /var/log, so a non-root run quietly gets the console only.
    """
    console_level = _parse_level(level)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.addHandler(_console_handler(console_level))
    root.setLevel(console_level)
    logging.raiseExceptions = False

    if not log_file:
        return False

    file_level = _parse_level(log_file_level) if log_file_level else console_level
    try:
        root.addHandler(_install_log_handler(log_file, file_level))
    except OSError as e:
        logging.getLogger(__name__).info("Install log disabled (%s): %s", log_file, e)
        return False

    root.setLevel(min(console_level, file_level))
    return True


def _parse_level(level: str | None) -> int:
    """Level name to number; unknown or empty names mean WARNING."""
    numeric = logging.getLevelName(level.upper()) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
