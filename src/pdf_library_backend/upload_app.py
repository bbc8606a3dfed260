"""
Public upload service.

Endpoints:
    POST   /api/upload        upload one PDF (multipart field ``pdf``)
    GET    /api/books         list every book record
    GET    /api/stats         book count and total size
    DELETE /api/books/{id}    delete a record and its stored file
    GET    /health            liveness check
    GET    /libros/{file}     stored PDFs (prefix is configurable)

Run with:
    uvicorn pdf_library_backend.upload_app:app --host 0.0.0.0 --port 5000
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, File, UploadFile
from fastapi.staticfiles import StaticFiles

from .configuration import Settings, get_settings
from .errors import BadRequestError
from .library import LibraryService
from .models import BookRecord, BookResult, HealthStatus, LibraryStats, OperationResult
from .store import RecordStore
from .utils import ensure_directory
from .web import build_app, get_library, health_status

SERVICE_NAME = "upload-server"

router = APIRouter()


@router.post("/api/upload", response_model=BookResult, response_model_exclude_none=True)
def upload_book(
    pdf: Optional[UploadFile] = File(None),
    library: LibraryService = Depends(get_library),
) -> BookResult:
    if pdf is None:
        raise BadRequestError("No file selected")
    book = library.upload_book(pdf.file, pdf.filename, pdf.content_type)
    return BookResult(success=True, message=f'Book "{book.title}" uploaded successfully', book=book)


@router.get("/api/books", response_model=List[BookRecord], response_model_exclude_none=True)
def list_books(library: LibraryService = Depends(get_library)) -> List[BookRecord]:
    return library.list_books()


@router.get("/api/stats", response_model=LibraryStats)
def get_stats(library: LibraryService = Depends(get_library)) -> LibraryStats:
    return library.stats()


@router.delete("/api/books/{book_id}", response_model=OperationResult)
def delete_book(book_id: str, library: LibraryService = Depends(get_library)) -> OperationResult:
    library.delete_book(book_id)
    return OperationResult(success=True, message="Book deleted successfully")


@router.get("/health", response_model=HealthStatus)
def healthcheck() -> HealthStatus:
    return health_status(SERVICE_NAME)


def create_upload_app(settings: Optional[Settings] = None, store: Optional[RecordStore] = None) -> FastAPI:
    """
    Build the upload service.

    Args:
        settings: Application settings (default: loaded from config.yaml and the environment)
        store: Record store to use instead of the configured JSON file
    """
    settings = settings or get_settings()
    library = LibraryService.from_settings(settings, store=store)

    app = build_app("PDF Library Upload API", settings, library)
    app.include_router(router)

    upload_dir = ensure_directory(settings.storage.upload_dir)
    app.mount(settings.storage.public_prefix.rstrip("/"), StaticFiles(directory=upload_dir), name="libros")
    return app


app = create_upload_app()
