from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BookRecord(CamelModel):
    # Unknown keys already present in the JSON file survive a rewrite.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str
    filename: str
    original_name: str
    title: str
    author: Optional[str] = None
    size: str
    upload_date: str
    last_modified: Optional[str] = None
    path: str

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class BookUpdate(BaseModel):
    title: Optional[str] = None
    author: Optional[str] = None


class OperationResult(BaseModel):
    success: bool
    message: str


class BookResult(OperationResult):
    book: Optional[BookRecord] = None


class LibraryStats(CamelModel):
    total_books: int
    total_size: str
    active_users: int
    last_update: str


class AdminStats(CamelModel):
    total_books: int
    total_size: str
    by_month: Dict[str, int]
    recent_uploads: List[BookRecord]


class AdminOverview(BaseModel):
    books: List[BookRecord]
    # Empty mapping when the store could not be read.
    stats: Dict[str, Any]


class HealthStatus(BaseModel):
    status: str
    service: str
    timestamp: str
