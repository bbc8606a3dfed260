"""
Pytest configuration and fixtures for PDF Library Backend tests.
"""

import os
import shutil
import tempfile

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing the apps
_TEST_ROOT = tempfile.mkdtemp(prefix="pdf_library_test_")
os.environ["PDF_LIBRARY_DB_FILE"] = os.path.join(_TEST_ROOT, "data", "books.json")
os.environ["PDF_LIBRARY_UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "libros")

from pdf_library_backend.admin_app import create_admin_app
from pdf_library_backend.configuration import build_settings
from pdf_library_backend.store import JsonFileRecordStore
from pdf_library_backend.upload_app import create_upload_app

# Minimal PDF that is technically valid
PDF_CONTENT = b"""%PDF-1.4
1 0 obj
<< /Type /Catalog /Pages 2 0 R >>
endobj
2 0 obj
<< /Type /Pages /Kids [3 0 R] /Count 1 >>
endobj
3 0 obj
<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] >>
endobj
xref
0 4
0000000000 65535 f
0000000009 00000 n
0000000058 00000 n
0000000115 00000 n
trailer
<< /Size 4 /Root 1 0 R >>
startxref
196
%%EOF"""


@pytest.fixture(scope="session", autouse=True)
def cleanup_test_root():
    """Remove the directories used by the module-level apps."""
    yield
    shutil.rmtree(_TEST_ROOT, ignore_errors=True)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing storage at a per-test directory."""
    return build_settings(
        overrides={
            "storage": {
                "db_file": str(tmp_path / "data" / "books.json"),
                "upload_dir": str(tmp_path / "libros"),
            }
        }
    )


@pytest.fixture
def store(settings):
    """JSON record store shared by the upload and admin apps of one test."""
    return JsonFileRecordStore(settings.storage.db_file)


@pytest.fixture
def upload_client(settings, store):
    """Test client for the upload service."""
    return TestClient(create_upload_app(settings, store))


@pytest.fixture
def admin_client(settings, store):
    """Test client for the admin service."""
    return TestClient(create_admin_app(settings, store))


@pytest.fixture
def upload_dir(settings):
    return settings.storage.upload_dir


@pytest.fixture
def sample_pdf():
    """Bytes of a minimal valid PDF file."""
    return PDF_CONTENT


@pytest.fixture
def upload_pdf(upload_client, sample_pdf):
    """Upload a PDF through the upload service and return the JSON response."""

    def _upload(name="report.pdf", content=None, content_type="application/pdf"):
        response = upload_client.post(
            "/api/upload",
            files={"pdf": (name, content if content is not None else sample_pdf, content_type)},
        )
        assert response.status_code == 200
        return response.json()

    return _upload
