"""
Internal admin service.

Endpoints:
    GET    /api/admin/books        books plus totals, per-month histogram and recent uploads
    PUT    /api/admin/books/{id}   edit title and/or author
    DELETE /api/admin/books/{id}   delete a record and its stored file
    GET    /health                 liveness check
    GET    /                       admin panel page

Run with:
    uvicorn pdf_library_backend.admin_app:app --host 0.0.0.0 --port 3000
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI
from fastapi.responses import FileResponse

from .configuration import Settings, get_settings
from .library import LibraryService
from .models import AdminOverview, BookResult, BookUpdate, HealthStatus, OperationResult
from .store import RecordStore
from .web import build_app, get_library, health_status

SERVICE_NAME = "admin-panel"
ADMIN_PAGE = Path(__file__).resolve().parent / "static" / "admin.html"

router = APIRouter()


@router.get("/api/admin/books", response_model=AdminOverview, response_model_exclude_none=True)
def list_books(library: LibraryService = Depends(get_library)) -> AdminOverview:
    return library.admin_overview()


@router.put("/api/admin/books/{book_id}", response_model=BookResult, response_model_exclude_none=True)
def update_book(
    book_id: str,
    update: Optional[BookUpdate] = None,
    library: LibraryService = Depends(get_library),
) -> BookResult:
    book = library.update_book(book_id, update or BookUpdate())
    return BookResult(success=True, message="Book updated", book=book)


@router.delete("/api/admin/books/{book_id}", response_model=OperationResult)
def delete_book(book_id: str, library: LibraryService = Depends(get_library)) -> OperationResult:
    library.delete_book(book_id)
    return OperationResult(success=True, message="Book deleted successfully")


@router.get("/health", response_model=HealthStatus)
def healthcheck() -> HealthStatus:
    return health_status(SERVICE_NAME)


@router.get("/", include_in_schema=False)
def admin_page() -> FileResponse:
    return FileResponse(ADMIN_PAGE, media_type="text/html")


def create_admin_app(settings: Optional[Settings] = None, store: Optional[RecordStore] = None) -> FastAPI:
    """
    Build the admin service.

    Args:
        settings: Application settings (default: loaded from config.yaml and the environment)
        store: Record store to use instead of the configured JSON file
    """
    settings = settings or get_settings()
    library = LibraryService.from_settings(settings, store=store)

    app = build_app("PDF Library Admin API", settings, library)
    app.include_router(router)
    return app


app = create_admin_app()
