"""
Book library operations shared by the upload and admin services.

This module coordinates the record store and the file manager:
- Uploading a PDF and registering its record
- Listing records and computing aggregate statistics
- Editing record metadata
- Deleting a record together with its stored file

The LibraryService class provides the business logic for both HTTP apps. Read
operations degrade to empty results when the store cannot be read; write
operations raise the errors defined in ``errors`` and leave the conversion to
JSON responses to the apps.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import BinaryIO, Dict, Iterable, List, Optional

from .configuration import Settings
from .errors import BadRequestError, CorruptStoreError, FileSystemError, NotFoundError, PersistenceError
from .files import FileManager
from .models import AdminOverview, AdminStats, BookRecord, BookUpdate, LibraryStats
from .store import JsonFileRecordStore, RecordStore
from .utils import format_megabytes, monotonic_millis, parse_iso, strip_pdf_suffix, utc_now_iso

logger = logging.getLogger(__name__)

# Shown by the public stats endpoint; there is no session tracking.
ACTIVE_USERS = 1
RECENT_UPLOADS_LIMIT = 5
UNKNOWN_MONTH = "unknown"


def total_size(records: Iterable[BookRecord]) -> str:
    """
    Sum the ``size`` fields (MB) of ``records``, formatted with two decimals.

    Sizes that are not numbers count as zero.
    """
    total = 0.0
    for record in records:
        try:
            total += float(record.size)
        except ValueError:
            logger.warning(f"Ignoring non-numeric size {record.size!r} on book {record.id}")
    return f"{total:.2f}"


def books_by_month(records: Iterable[BookRecord]) -> Dict[str, int]:
    """
    Histogram of uploads keyed by ``YYYY-MM`` (UTC) of each ``uploadDate``.

    Records whose upload date cannot be parsed are counted under ``"unknown"``,
    so the counts always add up to the number of records.
    """
    months: Counter[str] = Counter()
    for record in records:
        try:
            uploaded = parse_iso(record.upload_date)
        except ValueError:
            months[UNKNOWN_MONTH] += 1
            continue
        months[f"{uploaded.year}-{uploaded.month:02d}"] += 1
    return dict(months)


def recent_uploads(records: List[BookRecord], limit: int = RECENT_UPLOADS_LIMIT) -> List[BookRecord]:
    """Last ``limit`` records in reverse insertion order (most recent first)."""
    return list(reversed(records[-limit:])) if limit > 0 else []


class LibraryService:
    """
    Central coordinator for the book collection.

    Attributes:
        store: Record store holding the canonical record list
        files: File manager owning the stored PDFs
        public_prefix: URL prefix under which stored files are served
    """

    def __init__(self, store: RecordStore, files: FileManager, public_prefix: str = "/libros") -> None:
        self.store = store
        self.files = files
        self.public_prefix = public_prefix.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings, store: Optional[RecordStore] = None) -> "LibraryService":
        """
        Build a service from configuration.

        Args:
            settings: Resolved application settings
            store: Record store to use instead of the configured JSON file
        """
        storage = settings.storage
        return cls(
            store=store or JsonFileRecordStore(storage.db_file),
            files=FileManager(storage.upload_dir, storage.max_upload_bytes),
            public_prefix=storage.public_prefix,
        )

    def _load_or_empty(self) -> Optional[List[BookRecord]]:
        try:
            return self.store.load_all()
        except CorruptStoreError as exc:
            logger.error(f"Reading books failed: {exc.message}")
            return None

    def upload_book(self, stream: BinaryIO, original_name: Optional[str], content_type: Optional[str]) -> BookRecord:
        """
        Store an uploaded PDF and append its record.

        Args:
            stream: Binary stream with the file contents
            original_name: User-supplied filename
            content_type: Declared MIME type

        Returns:
            The created record

        Raises:
            BadRequestError: If no file was selected
            UnsupportedMediaTypeError: If the upload is not a PDF
            PayloadTooLargeError: If the upload exceeds the size limit
            CorruptStoreError, PersistenceError: If the collection cannot be updated

        Note:
            If the record cannot be saved the stored file is removed again, so
            no file is left without a record.
        """
        if not original_name:
            raise BadRequestError("No file selected")

        try:
            stored = self.files.store(stream, original_name, content_type)
        except OSError as exc:
            raise PersistenceError(f"Error uploading file: {exc}") from exc

        book = BookRecord(
            id=str(monotonic_millis()),
            filename=stored.filename,
            original_name=original_name,
            title=strip_pdf_suffix(original_name),
            size=format_megabytes(stored.size),
            upload_date=utc_now_iso(),
            path=f"{self.public_prefix}/{stored.filename}",
        )

        def append(records: List[BookRecord]) -> BookRecord:
            # Another process may have used the same millisecond for an id.
            taken = {record.id for record in records}
            while book.id in taken:
                book.id = str(int(book.id) + 1)
            records.append(book)
            return book

        try:
            created = self.store.mutate(append)
        except (CorruptStoreError, PersistenceError):
            try:
                self.files.delete(stored.filename)
            except FileSystemError as exc:
                logger.error(f"Could not remove {stored.filename} after a failed save: {exc.message}")
            raise

        logger.info(f"New book uploaded: {created.title} ({created.id})")
        return created

    def list_books(self) -> List[BookRecord]:
        """All records as stored, or an empty list if the store is unreadable."""
        return self._load_or_empty() or []

    def stats(self) -> LibraryStats:
        """Book count, total size and a static active-user count."""
        books = self._load_or_empty()
        if books is None:
            return LibraryStats(total_books=0, total_size="0.00", active_users=0, last_update=utc_now_iso())
        return LibraryStats(
            total_books=len(books),
            total_size=total_size(books),
            active_users=ACTIVE_USERS,
            last_update=utc_now_iso(),
        )

    def admin_overview(self) -> AdminOverview:
        """
        Full collection plus extended statistics for the admin panel.

        Returns:
            AdminOverview whose stats hold totalBooks, totalSize, byMonth and
            recentUploads; books and stats are empty if the store is unreadable
        """
        books = self._load_or_empty()
        if books is None:
            return AdminOverview(books=[], stats={})
        stats = AdminStats(
            total_books=len(books),
            total_size=total_size(books),
            by_month=books_by_month(books),
            recent_uploads=recent_uploads(books),
        )
        return AdminOverview(books=books, stats=stats.model_dump(by_alias=True, exclude_none=True))

    def update_book(self, book_id: str, update: BookUpdate) -> BookRecord:
        """
        Overwrite title and/or author of a record.

        Empty or missing values leave the field unchanged. ``lastModified`` is
        set on every match.

        Raises:
            NotFoundError: If no record has ``book_id``
        """

        def apply(records: List[BookRecord]) -> BookRecord:
            book = _find(records, book_id)
            if update.title:
                book.title = update.title
            if update.author:
                book.author = update.author
            book.last_modified = utc_now_iso()
            return book

        book = self.store.mutate(apply)
        logger.info(f"Book {book_id} updated")
        return book

    def delete_book(self, book_id: str) -> BookRecord:
        """
        Delete a record and its stored file.

        The file goes first; a missing file is fine. If the file cannot be
        removed for another reason the record is kept and FileSystemError is
        raised. There is no rollback between the two steps.

        Raises:
            NotFoundError: If no record has ``book_id``
            FileSystemError: If the stored file cannot be removed
        """

        def remove(records: List[BookRecord]) -> BookRecord:
            book = _find(records, book_id)
            self.files.delete(book.filename)
            records.remove(book)
            return book

        book = self.store.mutate(remove)
        logger.info(f"Book deleted: {book.title} ({book.id})")
        return book


def _find(records: List[BookRecord], book_id: str) -> BookRecord:
    for record in records:
        if record.id == book_id:
            return record
    raise NotFoundError("Book not found")
