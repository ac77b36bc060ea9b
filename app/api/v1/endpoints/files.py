"""
File Serving Endpoints for the arrival card service

Serves issued arrival card PDFs from object storage; these are the URLs
returned as pdfUrl.
"""

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse
import logging

from app.core.config import get_settings
from app.core.errors import PublishError
from app.services.object_storage import LocalObjectStore, PDF_CONTENT_TYPE

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{bucket}/{filename}")
def serve_stored_file(bucket: str, filename: str):
    """
    Serve an issued PDF

    Args:
        bucket: storage bucket (only the configured PDF bucket is public)
        filename: object key, {unique_id}.pdf
    """
    settings = get_settings()
    if bucket != settings.PDF_BUCKET:
        raise HTTPException(status_code=404, detail="Bucket not found")

    if not filename.endswith('.pdf'):
        raise HTTPException(status_code=400, detail="Invalid file format")

    try:
        store = LocalObjectStore.from_settings(settings)
        file_path = store.object_path(filename)
    except PublishError:
        raise HTTPException(status_code=400, detail="Invalid file name")

    if not file_path.is_file():
        raise HTTPException(status_code=404, detail="File not found")

    return FileResponse(
        path=str(file_path),
        media_type=PDF_CONTENT_TYPE,
        filename=filename,
        headers={
            "Cache-Control": "public, max-age=3600",
            "Content-Disposition": f"inline; filename={filename}"
        }
    )
