"""
Users Router - Known uploader names and login.
"""
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..api.dto import UserRequest
from .dependencies import get_user_service

router = APIRouter()


@router.get("/users")
async def list_users():
    return get_user_service().list_users()


@router.post("/users")
async def add_user(request: UserRequest):
    """Add a user; an existing name (ignoring case) is returned unchanged with 200."""
    user, created = get_user_service().add_user(request.name)
    return JSONResponse(status_code=201 if created else 200, content=user)


@router.post("/users/login")
async def login(request: UserRequest):
    return get_user_service().login(request.name)


@router.delete("/users/{name}")
async def delete_user(name: str):
    get_user_service().delete_user(name)
    return {"message": "User deleted", "name": name}
