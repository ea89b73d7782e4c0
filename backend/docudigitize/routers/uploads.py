"""
Uploads Router - Drives the upload reconciliation pipeline.

Files are queued and processed one at a time. After each step the response
carries the pipeline state so the client can show the current decision:

    POST /uploads - Queue files and process the first one
    POST /uploads/current/duplicate - Replace or skip a detected duplicate
    POST /uploads/current/commit - Save the reviewed extraction
    POST /uploads/current/process - Retry a failed or paused extraction
    POST /uploads/current/skip - Drop the current file
    DELETE /uploads - Abandon the batch
"""
from fastapi import APIRouter, UploadFile, File
from typing import List

from ..api.dto import CommitUploadRequest, DuplicateDecisionRequest
from ..utils.validators import validate_name
from .dependencies import get_upload_pipeline
from ..core.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/uploads")
async def get_upload_state():
    return get_upload_pipeline().get_state()


@router.post("/uploads")
async def upload_files(files: List[UploadFile] = File(...)):
    """Queue uploaded files (PNG, JPEG, PDF) and start processing the current one."""
    pipeline = get_upload_pipeline()
    batch = []
    for upload in files:
        data = await upload.read()
        batch.append((upload.filename or "upload", upload.content_type or "", data))

    result = pipeline.enqueue(batch)
    await pipeline.process_current()
    return {**result, "state": pipeline.get_state()}


@router.post("/uploads/current/process")
async def process_current_upload():
    pipeline = get_upload_pipeline()
    await pipeline.process_current()
    return pipeline.get_state()


@router.post("/uploads/current/duplicate")
async def resolve_duplicate(request: DuplicateDecisionRequest):
    pipeline = get_upload_pipeline()
    task = await pipeline.resolve_duplicate(request.replace)
    # Skipping advances the queue; start on the next file
    if not request.replace:
        await pipeline.process_current()
    return {"task": task.to_dict(), "state": pipeline.get_state()}


@router.post("/uploads/current/commit")
async def commit_upload(request: CommitUploadRequest):
    """Store the reviewed extraction for the current file and move on to the next one."""
    pipeline = get_upload_pipeline()
    uploaded_by = validate_name(request.uploaded_by, "User name")
    entity = pipeline.commit(uploaded_by, request.metadata, request.overrides())
    # Continue with the next queued file, if any
    await pipeline.process_current()
    return {"file": entity, "state": pipeline.get_state()}


@router.post("/uploads/current/skip")
async def skip_upload():
    pipeline = get_upload_pipeline()
    pipeline.skip_current()
    await pipeline.process_current()
    return pipeline.get_state()


@router.delete("/uploads")
async def abandon_uploads():
    dropped = get_upload_pipeline().abandon()
    return {"message": "Upload batch abandoned", "dropped": dropped}
