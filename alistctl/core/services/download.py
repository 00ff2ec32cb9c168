"""
Release download with bounded retries.

An attempt only counts as successful when the destination file exists
and is non-empty afterwards, regardless of what the transfer reported.
Backoff grows linearly between attempts (5s, 10s, 15s, ...).
"""

from __future__ import annotations

import http.client
import logging
import time
import urllib.error
import urllib.request
from pathlib import Path
from typing import Callable

from alistctl import __version__
from alistctl.core.errors import DownloadFailed

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, Path, float], None]

_CHUNK = 64 * 1024


def fetch_url(url: str, dest: Path, timeout: float) -> None:
    """Stream ``url`` into ``dest`` (overwriting it).

    A body shorter than the announced ``Content-Length`` is an error,
    not a short file.

    Raises:
        OSError / urllib.error.URLError / http.client.HTTPException on
        any transfer problem.
    """
    req = urllib.request.Request(url, headers={"User-Agent": f"alistctl/{__version__}"})
    written = 0
    with urllib.request.urlopen(req, timeout=timeout) as resp, open(dest, "wb") as out:
        expected = resp.headers.get("Content-Length")
        for chunk in iter(lambda: resp.read(_CHUNK), b""):
            out.write(chunk)
            written += len(chunk)

    if expected is not None and expected.isdigit() and written != int(expected):
        raise OSError(f"Incomplete transfer: got {written} of {expected} bytes")


def backoff_schedule(max_retries: int, initial_backoff: float) -> list[float]:
    """Sleeps taken between ``max_retries`` attempts."""
    return [initial_backoff * n for n in range(1, max_retries)]


def download(
    url: str,
    dest: Path,
    *,
    max_retries: int = 3,
    initial_backoff: float = 5.0,
    connect_timeout: float = 10.0,
    fetch: Fetcher = fetch_url,
    sleep: Callable[[float], None] = time.sleep,
) -> Path:
    """Download ``url`` to ``dest``, retrying on failure.

    Args:
        url: Source URL.
        dest: Destination file; overwritten on every attempt.
        max_retries: Total number of attempts.
        initial_backoff: Seconds before the second attempt; the n-th
            wait is ``initial_backoff * n``.
        connect_timeout: Per-attempt socket timeout.
        fetch: Transfer function (swappable for tests).
        sleep: Sleep function (swappable for tests).

    Returns:
        ``dest`` on success.

    Raises:
        DownloadFailed: After ``max_retries`` unsuccessful attempts.
    """
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    waits = backoff_schedule(max_retries, initial_backoff)
    last_error = "empty file"

    for attempt in range(1, max_retries + 1):
        logger.info("Downloading %s → %s (attempt %d/%d)", url, dest, attempt, max_retries)
        try:
            fetch(url, dest, connect_timeout)
        except (OSError, urllib.error.URLError, http.client.HTTPException, ValueError) as e:
            last_error = str(e)
            logger.warning("Download attempt %d failed: %s", attempt, e)
        else:
            if dest.is_file() and dest.stat().st_size > 0:
                logger.info("Download complete: %s (%d bytes)", dest, dest.stat().st_size)
                return dest
            last_error = "empty file"
            logger.warning("Download attempt %d produced no data", attempt)

        if attempt < max_retries:
            wait = waits[attempt - 1]
            logger.warning("Retrying in %.0fs...", wait)
            sleep(wait)

    raise DownloadFailed(f"Download failed after {max_retries} attempts: {url} ({last_error})")
