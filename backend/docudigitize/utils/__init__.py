"""
Utility functions - Pure functions with no dependencies.
These can be used across all layers.
"""
from .checksum import calculate_content_hash, calculate_file_checksum
from .document_utils import now_iso, name_key, name_index, build_file_record
from .validators import validate_name, validate_translation_language, validate_archive_status

__all__ = [
    "calculate_content_hash",
    "calculate_file_checksum",
    "now_iso",
    "name_key",
    "name_index",
    "build_file_record",
    "validate_name",
    "validate_translation_language",
    "validate_archive_status",
]
