"""
Checksum utilities - Pure functions for content hash calculation.

The content hash is the duplicate-detection key of a digitized file.
It is a comparison key only, never an entity id.
"""
import hashlib
from pathlib import Path
from ..domain.value_objects import ContentHash

CHUNK_SIZE = 4096


def calculate_content_hash(data: bytes) -> ContentHash:
    """
    Calculate the SHA-256 hex digest of raw file bytes.

    Args:
        data: Complete file content

    Returns:
        Lowercase SHA-256 hex string (64 chars)
    """
    sha256_hash = hashlib.sha256()
    # Hash in chunks without copying the buffer
    view = memoryview(data)
    for start in range(0, len(view), CHUNK_SIZE):
        sha256_hash.update(view[start:start + CHUNK_SIZE])
    return ContentHash(sha256_hash.hexdigest())


def calculate_file_checksum(file_path: Path) -> ContentHash:
    """
    Calculate SHA-256 checksum of a file.

    Args:
        file_path: Path to file

    Returns:
        SHA-256 checksum as hex string

    Raises:
        FileNotFoundError: If file doesn't exist
        IOError: If file cannot be read
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    sha256_hash = hashlib.sha256()
    try:
        with open(file_path, "rb") as f:
            for byte_block in iter(lambda: f.read(CHUNK_SIZE), b""):
                sha256_hash.update(byte_block)
    except IOError as e:
        raise IOError(f"Error reading file {file_path}: {e}") from e

    return ContentHash(sha256_hash.hexdigest())
