"""
Backup Router - Snapshot download, destructive restore and additive merge.

    GET /backup - Download a version-1 snapshot (files marked 'keep' only)
    POST /backup/restore - Replace the workspace (requires confirm=true)
    POST /backup/merge - Add what the snapshot has and the workspace lacks
"""
from fastapi import APIRouter, UploadFile, File, Form
from fastapi.responses import Response

from ..api.exceptions import InvalidInputError
from ..services.snapshot_codec import backup_filename, encode_snapshot, serialize_snapshot
from .dependencies import get_merge_service, get_restore_service, get_store
from ..core.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/backup")
async def download_backup():
    snapshot = encode_snapshot(get_store())
    filename = backup_filename()
    logger.info(f"Backup download: {filename}")
    return Response(
        content=serialize_snapshot(snapshot),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("/backup/restore")
async def restore_backup(file: UploadFile = File(...), confirm: bool = Form(False)):
    """Overwrite all backup collections with the uploaded snapshot. Users are kept."""
    if not confirm:
        raise InvalidInputError("Restoring replaces all current data; resend with confirm=true")
    # Nothing is written unless the whole snapshot decodes
    raw = await file.read()
    result = get_restore_service().restore(raw)
    return result.to_dict()


@router.post("/backup/merge")
async def merge_backup(file: UploadFile = File(...)):
    raw = await file.read()
    result = get_merge_service().merge(raw)
    return result.to_dict()
