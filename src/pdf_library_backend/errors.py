"""
Error taxonomy for the PDF library and the single place that turns it into HTTP responses.

Every failure a handler can produce is a :class:`LibraryError`. The handler
registered by :func:`register_error_handlers` converts it into a JSON body with
``success: false`` and a human-readable message. Any other exception escaping a
route is logged with its traceback and answered the same way. Both services
answer these with HTTP 200 and leave the status code to transport-level failures only.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LibraryError(Exception):
    """Base exception for library operations.

    Args:
        message (str): Human-readable error message returned to the client
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class BadRequestError(LibraryError):
    """Raised when an upload request is missing its file or is otherwise malformed."""


class UnsupportedMediaTypeError(LibraryError):
    """Raised when an uploaded file is not declared as a PDF."""


class PayloadTooLargeError(LibraryError):
    """Raised when an uploaded file exceeds the configured size limit."""


class NotFoundError(LibraryError):
    """Raised when no record matches the requested id."""


class CorruptStoreError(LibraryError):
    """Raised when the persisted record collection cannot be read or parsed."""


class PersistenceError(LibraryError):
    """Raised when the record collection cannot be written."""


class FileSystemError(LibraryError):
    """Raised on unexpected I/O failures while removing a stored file."""


async def library_error_handler(request: Request, exc: LibraryError) -> JSONResponse:
    if isinstance(exc, NotFoundError):
        logger.info(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=200, content={"success": False, "message": exc.message})


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed unexpectedly", exc_info=exc)
    return JSONResponse(status_code=200, content={"success": False, "message": f"Unexpected error: {exc}"})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LibraryError, library_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unexpected_error_handler)
