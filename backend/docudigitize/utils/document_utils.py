"""
Document utility functions for record construction and name normalization.
"""
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Iterable

from ..domain.value_objects import ArchiveStatus, UNKNOWN_LANGUAGE


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def name_key(name: str) -> str:
    """Case-insensitive comparison key for user and field names."""
    return name.strip().casefold()


def name_index(entries: Iterable[Dict[str, Any]], field: str = "name") -> Dict[str, Dict[str, Any]]:
    """Build a fresh case-insensitive lookup keyed by ``field``."""
    index: Dict[str, Dict[str, Any]] = {}
    for entry in entries:
        value = entry.get(field)
        if isinstance(value, str):
            # First entry wins on case-insensitive collisions
            index.setdefault(name_key(value), entry)
    return index


def build_file_record(
    filename: str,
    content_hash: str,
    extraction: Dict[str, Any],
    uploaded_by: str,
    metadata: Optional[Dict[str, str]] = None,
    created_at: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Assemble the stored fields of a DigitizedFile from an extraction result.

    Args:
        filename: Original filename of the upload
        content_hash: Hash computed for the uploaded bytes
        extraction: Normalized extraction result (ocrText, summary, originalLanguage, metadata)
        uploaded_by: Name of the active user
        metadata: Reviewed metadata values; falls back to the extracted ones
        created_at: Creation timestamp; omitted for replacements, which keep theirs

    Returns:
        Field dictionary without an id
    """
    record = {
        "originalFilename": filename,
        "contentHash": content_hash,
        "ocrText": extraction.get("ocrText", ""),
        "summary": extraction.get("summary", ""),
        "originalLanguage": extraction.get("originalLanguage") or UNKNOWN_LANGUAGE,
        # Reviewed values replace the extracted ones as a whole
        "metadata": dict(metadata if metadata is not None else extraction.get("metadata", {})),
        "uploadedBy": uploaded_by,
        "archiveStatus": ArchiveStatus.KEEP.value,
    }
    if created_at is not None:
        record["createdAt"] = created_at
    return record
