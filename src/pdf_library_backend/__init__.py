"""
PDF Library Backend - upload and admin APIs for a small PDF collection

This package provides two FastAPI-based web services sharing one book
collection. It enables:

- PDF uploads with filename sanitization, type and size validation
- Listing and deleting books together with their stored files
- Aggregate statistics (totals, uploads per month, recent uploads)
- Editing book titles and authors from an admin panel

Books are kept in a single JSON array file; the PDFs live in an upload
directory next to it.

Key Components:
    - upload_app: public upload service (default port 5000)
    - admin_app: internal admin service (default port 3000)
    - library: book operations shared by both services
    - store: JSON-file and in-memory record stores
    - files: stored PDF management
    - configuration: config.yaml defaults with environment overrides

Usage:
    Run the services with:
        pdf-library-upload
        pdf-library-admin

    Or directly through uvicorn:
        uvicorn pdf_library_backend.upload_app:app --port 5000
        uvicorn pdf_library_backend.admin_app:app --port 3000

Known limitation:
    Writes are serialized inside one process only. The two services run as
    separate processes over the same JSON file, so simultaneous writes from
    both can still lose an update.
"""
