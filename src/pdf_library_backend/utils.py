"""
Utility functions for filesystem operations, timestamps and size formatting.

This module provides helper functions for:
- Ensuring directory creation with proper error handling
- Generating strictly increasing millisecond timestamps
- Producing ISO-8601 timestamps in the format stored in the library
- Formatting byte counts as megabytes
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock

BYTES_PER_MEGABYTE = 1024 * 1024

_clock_lock = Lock()
_last_millis = 0


def ensure_directory(path: Path) -> Path:
    """
    Create a directory if it doesn't exist, including parent directories.

    Args:
        path: The directory path to create

    Returns:
        The same path object for chaining

    Raises:
        OSError: If directory creation fails due to permissions or other I/O errors
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def monotonic_millis() -> int:
    """
    Return the current Unix time in milliseconds, strictly increasing per process.

    Two calls in the same millisecond never return the same value; the second
    one is bumped forward by one. Record ids and stored filenames rely on this.
    """
    global _last_millis
    with _clock_lock:
        now = time.time_ns() // 1_000_000
        if now <= _last_millis:
            now = _last_millis + 1
        _last_millis = now
        return now


def utc_now_iso() -> str:
    """
    Current UTC time as ISO-8601 with millisecond precision and a ``Z`` suffix.

    Example:
        >>> utc_now_iso()
        "2024-03-05T10:20:30.123Z"
    """
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp as written by :func:`utc_now_iso`.

    Naive timestamps are assumed to be UTC.

    Raises:
        ValueError: If the value is not a valid ISO-8601 timestamp
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_megabytes(num_bytes: int) -> str:
    """
    Format a byte count as megabytes with two decimals.

    Example:
        >>> format_megabytes(1572864)
        "1.50"
    """
    return f"{num_bytes / BYTES_PER_MEGABYTE:.2f}"


def strip_pdf_suffix(filename: str) -> str:
    """Drop one trailing ``.pdf`` from a file name."""
    return filename.removesuffix(".pdf")
