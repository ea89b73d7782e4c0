"""
Validation utilities - Pure validation functions.
"""
from typing import Optional

from ..api.exceptions import InvalidInputError
from ..domain.value_objects import ArchiveStatus

SUPPORTED_TRANSLATION_LANGUAGES = ("English", "Greek")


def validate_name(name: Optional[str], kind: str = "Name") -> str:
    """
    Validate and trim a user or field name.

    Raises:
        InvalidInputError: If the name is empty after trimming
    """
    cleaned = (name or "").strip()
    if not cleaned:
        raise InvalidInputError(f"{kind} cannot be empty")
    return cleaned


def validate_translation_language(language: str) -> str:
    """
    Validate a translation target language.

    Raises:
        InvalidInputError: If the language is not English or Greek
    """
    if language not in SUPPORTED_TRANSLATION_LANGUAGES:
        raise InvalidInputError(
            f"Unsupported translation language: {language}. "
            f"Supported: {', '.join(SUPPORTED_TRANSLATION_LANGUAGES)}"
        )
    return language


def validate_archive_status(value: str) -> ArchiveStatus:
    """
    Validate an archive status value.

    Raises:
        InvalidInputError: If the value is neither 'keep' nor 'exclude'
    """
    try:
        return ArchiveStatus(value)
    except ValueError:
        raise InvalidInputError(f"Invalid archive status: {value}. Use 'keep' or 'exclude'")
