"""
Search Router - Handles natural-language search over digitized files.
"""
from fastapi import APIRouter

from ..api.dto import SmartSearchRequest
from .dependencies import get_file_service

router = APIRouter()


@router.post("/search")
async def smart_search(request: SmartSearchRequest):
    """
    Ask the AI which files match a free-text query.

    Returns:
        {"query", "results": [{"file", "reason"}]}; results may be empty
    """
    results = await get_file_service().smart_search(request.query)
    return {"query": request.query, "results": results}
