"""
Storage of uploaded PDF files.

Stored names follow ``<unixMillis>_<sanitizedOriginalName>``. The sanitized
part keeps only ``[a-zA-Z0-9.-]``; every other character becomes ``_``. The
millisecond prefix comes from a strictly increasing per-process clock, and the
file is created in exclusive mode, so two uploads sharing an original name
never end up on the same stored file.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from .errors import FileSystemError, PayloadTooLargeError, UnsupportedMediaTypeError
from .utils import BYTES_PER_MEGABYTE, ensure_directory, monotonic_millis

logger = logging.getLogger(__name__)

# Characters allowed in the stored part of a filename: ASCII letters, digits, dots, hyphens
SANITIZE_PATTERN = re.compile(r"[^a-zA-Z0-9.\-]")

PDF_CONTENT_TYPE = "application/pdf"
DEFAULT_MAX_UPLOAD_BYTES = 50 * BYTES_PER_MEGABYTE
CHUNK_SIZE = 1024 * 1024
_MAX_NAME_ATTEMPTS = 100


def sanitize_filename(filename: str) -> str:
    """
    Replace every character outside ``[a-zA-Z0-9.-]`` with an underscore.

    Example:
        >>> sanitize_filename("mi libro (v2).pdf")
        "mi_libro__v2_.pdf"
    """
    return SANITIZE_PATTERN.sub("_", filename)


def build_stored_filename(original_name: str, timestamp_ms: int) -> str:
    """Stored filename for an upload created at ``timestamp_ms``."""
    return f"{timestamp_ms}_{sanitize_filename(original_name)}"


@dataclass(frozen=True)
class StoredFile:
    filename: str
    size: int


class FileManager:
    """
    Owns the lifecycle of physical files in the upload directory.

    No other component reads or removes files there directly.
    """

    def __init__(self, upload_dir: Path, max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> None:
        self.upload_dir = Path(upload_dir)
        self.max_upload_bytes = max_upload_bytes

    def resolve(self, filename: str) -> Path:
        """Path of a stored file. Only the base name is used."""
        return self.upload_dir / Path(filename).name

    def store(self, stream: BinaryIO, original_name: str, content_type: Optional[str]) -> StoredFile:
        """
        Copy an uploaded PDF into the upload directory.

        Args:
            stream: Readable binary stream with the upload payload
            original_name: User-supplied filename (untrusted)
            content_type: Declared MIME type of the upload

        Returns:
            The stored filename and the number of bytes written

        Raises:
            UnsupportedMediaTypeError: If the declared type is not ``application/pdf``
            PayloadTooLargeError: If the payload exceeds ``max_upload_bytes``
        """
        if content_type != PDF_CONTENT_TYPE:
            raise UnsupportedMediaTypeError("Only PDF files are allowed")

        ensure_directory(self.upload_dir)
        destination, handle = self._open_unique(original_name)

        written = 0
        try:
            with handle:
                while chunk := stream.read(CHUNK_SIZE):
                    written += len(chunk)
                    if written > self.max_upload_bytes:
                        raise PayloadTooLargeError(
                            f"File exceeds the {self.max_upload_bytes / BYTES_PER_MEGABYTE:.0f}MB limit"
                        )
                    handle.write(chunk)
        except BaseException:
            destination.unlink(missing_ok=True)
            raise

        logger.info(f"Stored upload {original_name!r} as {destination.name} ({written} bytes)")
        return StoredFile(filename=destination.name, size=written)

    def _open_unique(self, original_name: str) -> tuple[Path, BinaryIO]:
        for _ in range(_MAX_NAME_ATTEMPTS):
            destination = self.upload_dir / build_stored_filename(original_name, monotonic_millis())
            try:
                return destination, destination.open("xb")
            except FileExistsError:
                # Another process took this millisecond; the clock moves on.
                continue
        raise FileExistsError(f"Could not allocate a unique filename for {original_name!r}")

    def delete(self, filename: str) -> bool:
        """
        Remove a stored file.

        Returns:
            True if a file was removed, False if it was already absent

        Raises:
            FileSystemError: On unexpected I/O errors (permissions, device)
        """
        path = self.resolve(filename)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.error(f"Failed to delete stored file {path}: {exc}")
            raise FileSystemError(f"Could not delete file {path.name}: {exc}") from exc
        logger.info(f"Deleted stored file {path}")
        return True

