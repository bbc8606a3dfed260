"""
Record store holding the complete book collection.

The collection is always read and written as a whole: there are no partial
updates and lookups are a linear scan by id. Two implementations share one
contract:

- JsonFileRecordStore: a single JSON array on disk, compatible with the files
  written by earlier versions of the service
- InMemoryRecordStore: a process-local list, used by tests

Concurrency:
    ``mutate`` holds a per-store lock across load -> change -> save, so two
    requests handled by the same process can no longer overwrite each other.
    The lock does not extend across processes. The upload and admin services
    run as separate processes over the same JSON file, and a write from one can
    still silently replace a concurrent write from the other (last writer wins).
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import Any, Callable, List, TypeVar

from pydantic import ValidationError

from .errors import CorruptStoreError, PersistenceError
from .models import BookRecord
from .utils import ensure_directory

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecordStore(ABC):
    """
    Load/save contract for the book collection.

    Subclasses implement ``load_all`` and ``save_all``; read-modify-write
    cycles go through ``mutate`` so they are serialized within the process.
    """

    def __init__(self) -> None:
        self._write_lock = Lock()

    @abstractmethod
    def load_all(self) -> List[BookRecord]:
        """
        Return every record in insertion order.

        Raises:
            CorruptStoreError: If the persisted collection cannot be read
        """

    @abstractmethod
    def save_all(self, records: List[BookRecord]) -> None:
        """
        Replace the persisted collection with ``records``.

        Raises:
            PersistenceError: If the collection cannot be written
        """

    def mutate(self, change: Callable[[List[BookRecord]], T]) -> T:
        """
        Run one serialized load -> change -> save cycle.

        ``change`` receives the loaded list, edits it in place and returns the
        value handed back to the caller. If it raises, nothing is saved.
        """
        with self._write_lock:
            records = self.load_all()
            result = change(records)
            self.save_all(records)
            return result


class JsonFileRecordStore(RecordStore):
    """Record store backed by one pretty-printed JSON array file."""

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = Path(path)
        self._initialized = False

    def _ensure_initialized(self) -> None:
        if self._initialized:
            return
        try:
            ensure_directory(self.path.parent)
            if not self.path.exists():
                logger.info(f"Initializing empty record store at {self.path}")
                self.path.write_text("[]", encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Could not initialize record store: {exc}") from exc
        self._initialized = True

    def load_all(self) -> List[BookRecord]:
        try:
            self._ensure_initialized()
            raw = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError, PersistenceError) as exc:
            raise CorruptStoreError(f"Could not read record store: {exc}") from exc

        try:
            data: Any = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CorruptStoreError(f"Record store is not valid JSON: {exc}") from exc

        if not isinstance(data, list):
            raise CorruptStoreError("Record store must contain a JSON array")

        try:
            return [BookRecord.model_validate(item) for item in data]
        except ValidationError as exc:
            raise CorruptStoreError(f"Record store contains an invalid record: {exc}") from exc

    def save_all(self, records: List[BookRecord]) -> None:
        self._ensure_initialized()
        payload = json.dumps([record.to_json() for record in records], indent=2, ensure_ascii=False)

        # Write next to the target and swap it in, so readers see either the
        # old or the new collection.
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PersistenceError(f"Could not write record store: {exc}") from exc


class InMemoryRecordStore(RecordStore):
    """Record store kept in process memory. Records are copied in and out."""

    def __init__(self, records: List[BookRecord] | None = None) -> None:
        super().__init__()
        self._records: List[BookRecord] = [record.model_copy(deep=True) for record in records or []]

    def load_all(self) -> List[BookRecord]:
        return [record.model_copy(deep=True) for record in self._records]

    def save_all(self, records: List[BookRecord]) -> None:
        self._records = [record.model_copy(deep=True) for record in records]
