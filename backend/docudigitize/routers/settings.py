"""
Settings Router - Metadata field definitions, their history, autosave status
and AI credentials.
"""
from fastapi import APIRouter

from ..api.dto import (
    ApiKeyRequest,
    MetadataTitleRequest,
    MetadataTitlesReplaceRequest,
    TitleSuggestionRequest,
)
from .dependencies import get_ai_service, get_autosave_service, get_metadata_service

router = APIRouter()


@router.get("/settings/metadata-titles")
async def list_metadata_titles():
    return get_metadata_service().list_titles()


@router.post("/settings/metadata-titles", status_code=201)
async def add_metadata_title(request: MetadataTitleRequest):
    return get_metadata_service().add_title(request.name)


@router.put("/settings/metadata-titles")
async def replace_metadata_titles(request: MetadataTitlesReplaceRequest):
    """Replace the ordered field list (used for reordering)."""
    titles = [item.model_dump(exclude_none=True) for item in request.titles]
    return get_metadata_service().replace_titles(titles)


@router.patch("/settings/metadata-titles/{title_id}")
async def rename_metadata_title(title_id: str, request: MetadataTitleRequest):
    return get_metadata_service().rename_title(title_id, request.name)


@router.delete("/settings/metadata-titles/{title_id}")
async def delete_metadata_title(title_id: str):
    get_metadata_service().delete_title(title_id)
    return {"message": "Metadata title deleted", "id": title_id}


@router.post("/settings/metadata-titles/suggest")
async def suggest_metadata_titles(request: TitleSuggestionRequest):
    """Generate field names from a pasted sample with the AI and append the new ones."""
    return await get_metadata_service().suggest_titles(request.text, record_input=request.record_input)


@router.get("/settings/metadata-raw-inputs")
async def list_metadata_raw_inputs():
    return get_metadata_service().list_raw_inputs()


@router.get("/settings/metadata-history")
async def list_metadata_history():
    return get_metadata_service().list_settings_history()


@router.get("/settings/autosave")
async def get_autosave_status():
    autosave = get_autosave_service()
    return {**autosave.get_status(), "warning": autosave.unload_warning()}


@router.post("/settings/autosave/flush")
async def flush_autosave():
    saved = get_autosave_service().flush()
    return {"saved": saved, **get_autosave_service().get_status()}


@router.get("/settings/api-key")
async def get_api_key_status():
    ai_service = get_ai_service()
    return {"provider": ai_service.provider_name, "credentialsRequired": ai_service.credentials_required}


@router.post("/settings/api-key")
async def set_api_key(request: ApiKeyRequest):
    """Store a new AI key for this session (credential re-entry)."""
    ai_service = get_ai_service()
    ai_service.configure(request.api_key, request.provider)
    return {"provider": ai_service.provider_name, "credentialsRequired": ai_service.credentials_required}
