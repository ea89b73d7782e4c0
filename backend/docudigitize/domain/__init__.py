"""
Domain layer - Contains domain value objects and constants.
This layer is independent of infrastructure and frameworks.
"""
from .value_objects import (
    ArchiveStatus,
    Collection,
    ContentHash,
    UNKNOWN_LANGUAGE,
    LANGUAGE_ERROR,
    CLASSIFICATION_GOAL_KEY,
)

__all__ = [
    "ArchiveStatus",
    "Collection",
    "ContentHash",
    "UNKNOWN_LANGUAGE",
    "LANGUAGE_ERROR",
    "CLASSIFICATION_GOAL_KEY",
]
