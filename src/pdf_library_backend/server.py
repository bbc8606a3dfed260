"""
Console entry points running each service with uvicorn on its configured address.
"""

from __future__ import annotations

import uvicorn

from .configuration import ServiceSettings, get_settings
from .logging_setup import configure_logging


def _serve(app_path: str, service: ServiceSettings, log_level: str) -> None:
    configure_logging(log_level)
    uvicorn.run(app_path, host=service.host, port=service.port, log_level=log_level.lower())


def run_upload_service() -> None:
    settings = get_settings()
    _serve("pdf_library_backend.upload_app:app", settings.upload_service, settings.logging.level)


def run_admin_service() -> None:
    settings = get_settings()
    _serve("pdf_library_backend.admin_app:app", settings.admin_service, settings.logging.level)
