"""
Files Router - Handles digitized file operations.

This router is responsible for:
- Listing, retrieving, editing and deleting digitized files
- Archive status (keep / exclude from backups and spreadsheets)
- Translation and language re-evaluation through the AI service
- Exports of selected files (txt, csv, xlsx)

Example Usage:
    GET /files - List all files
    PATCH /files/{file_id} - Save reviewed edits
    POST /files/{file_id}/translate - Translate OCR text
    POST /files/export - Download selected files
"""
from fastapi import APIRouter
from fastapi.responses import Response
from typing import Any, Dict, List, Optional

from ..api.dto import (
    ArchiveStatusRequest,
    ExportRequest,
    FileSelectionRequest,
    FileUpdateRequest,
    TranslateRequest,
)
from ..services import export_service
from .dependencies import get_file_service, get_metadata_service
from ..core.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/files")
async def list_files(archive_status: Optional[str] = None) -> List[Dict[str, Any]]:
    """List all files, optionally only those with the given archive status."""
    return get_file_service().list_files(archive_status)


@router.post("/files/export")
async def export_files(request: ExportRequest):
    """
    Export the selected files.

    - txt: report with metadata, summary, translations and OCR text
    - csv: one row per file, one column per current metadata field
    - xlsx: filename, user and date of the selected files kept in the archive
    """
    files = get_file_service().get_files(request.file_ids)
    media_type = export_service.EXPORT_FORMATS[request.format][0]
    filename = export_service.export_filename(request.format)

    if request.format == "txt":
        content = export_service.export_txt(files).encode("utf-8")
    elif request.format == "csv":
        titles = get_metadata_service().list_titles()
        content = export_service.export_csv(files, titles).encode("utf-8")
    else:
        content = export_service.export_xlsx(files)

    logger.info(f"Exported {len(files)} file(s) as {request.format}")
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("/files/languages/re-evaluate")
async def re_evaluate_languages(request: FileSelectionRequest):
    """Re-run language identification for the selected files (all files when none are given)."""
    file_service = get_file_service()
    file_ids = request.file_ids or [f["id"] for f in file_service.list_files()]
    return await file_service.re_evaluate_languages(file_ids)


@router.get("/files/{file_id}")
async def get_file(file_id: str):
    return get_file_service().get_file(file_id)


@router.patch("/files/{file_id}")
async def update_file(file_id: str, request: FileUpdateRequest):
    return get_file_service().update_file(file_id, request.to_fields())


@router.put("/files/{file_id}/archive-status")
async def set_archive_status(file_id: str, request: ArchiveStatusRequest):
    return get_file_service().set_archive_status(file_id, request.archive_status)


@router.post("/files/{file_id}/translate")
async def translate_file(file_id: str, request: TranslateRequest):
    return await get_file_service().translate_file(file_id, request.target_language)


@router.delete("/files/{file_id}")
async def delete_file(file_id: str):
    get_file_service().delete_file(file_id)
    return {"message": "File deleted", "id": file_id}
