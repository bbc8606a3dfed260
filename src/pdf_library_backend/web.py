"""
Wiring shared by the upload and admin FastAPI apps.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .configuration import Settings
from .errors import register_error_handlers
from .library import LibraryService
from .logging_setup import configure_logging
from .models import HealthStatus
from .utils import utc_now_iso


def build_app(title: str, settings: Settings, library: LibraryService) -> FastAPI:
    configure_logging(settings.logging.level)

    app = FastAPI(title=title, version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.state.settings = settings
    app.state.library = library
    return app


def get_library(request: Request) -> LibraryService:
    return request.app.state.library


def health_status(service: str) -> HealthStatus:
    return HealthStatus(status="ok", service=service, timestamp=utc_now_iso())
