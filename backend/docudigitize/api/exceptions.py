"""
Custom exceptions for the workspace.
Separates business exceptions from HTTP exceptions.
"""
from typing import Any, Optional

from fastapi import HTTPException, status


class InvalidFormatError(Exception):
    """Raised when a backup snapshot is malformed or has an unsupported version."""
    pass


class NotFoundError(Exception):
    """Raised when an entity targeted by an update or lookup does not exist."""
    pass


class PersistenceError(Exception):
    """
    Raised when a store write could not be written to disk.

    The in-memory state already holds the change; ``result`` carries what the
    operation would have returned so callers can continue and surface a warning.
    """

    def __init__(self, message: str, result: Optional[Any] = None):
        super().__init__(message)
        self.result = result


class AuthError(Exception):
    """Raised when the AI service rejects or lacks credentials."""
    pass


class ServiceError(Exception):
    """Raised when an AI call fails for any non-credential reason."""
    pass


class DuplicateEntryError(Exception):
    """Raised when a name collides case-insensitively with an existing entry."""
    pass


class InvalidInputError(ValueError):
    """Raised when caller-provided input fails validation."""
    pass


class UploadStateError(Exception):
    """Raised when an upload action is not valid for the current task state."""
    pass


BUSINESS_EXCEPTIONS = (
    InvalidFormatError,
    NotFoundError,
    PersistenceError,
    AuthError,
    ServiceError,
    DuplicateEntryError,
    InvalidInputError,
    UploadStateError,
)


def handle_business_exception(e: Exception) -> HTTPException:
    """
    Convert business exceptions to HTTP exceptions.
    This keeps business logic clean of HTTP concerns.
    """
    if isinstance(e, InvalidFormatError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid backup file: {e}")
    elif isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    elif isinstance(e, PersistenceError):
        return HTTPException(
            status_code=status.HTTP_507_INSUFFICIENT_STORAGE,
            detail=f"Change applied for this session but could not be saved: {e}"
        )
    elif isinstance(e, AuthError):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"AI service credentials are invalid or missing, please provide a new API key. ({e})"
        )
    elif isinstance(e, ServiceError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    elif isinstance(e, DuplicateEntryError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    elif isinstance(e, InvalidInputError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    elif isinstance(e, UploadStateError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    else:
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
