"""
Snapshot codec for workspace backups.

A snapshot is a JSON document ``{version, createdAt, data}`` holding every
backup collection. Encoding exports only files marked 'keep'; decoding
validates the envelope and every entity before anything is written anywhere.
"""
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from ..api.exceptions import InvalidFormatError
from ..core.config import BACKUP_VERSION, BACKUP_FILENAME_PREFIX
from ..domain.value_objects import ArchiveStatus, Collection, CLASSIFICATION_GOAL_KEY
from ..models.backup import BackupData, BackupSnapshot
from ..utils.document_utils import now_iso
from .database.base import EntityStoreInterface
from ..core.logging_config import get_logger

logger = get_logger(__name__)

# Backup data key for each stored collection, in envelope order
BACKUP_KEYS = (
    ("files", Collection.FILES),
    ("categories", Collection.CATEGORIES),
    ("metadataTitles", Collection.METADATA_TITLES),
    ("categoryRawInputs", Collection.CATEGORY_RAW_INPUTS),
    ("metadataRawInputs", Collection.METADATA_RAW_INPUTS),
    ("categorySettingsHistory", Collection.CATEGORY_SETTINGS_HISTORY),
    ("metadataSettingsHistory", Collection.METADATA_SETTINGS_HISTORY),
    ("classificationGoalHistory", Collection.CLASSIFICATION_GOAL_HISTORY),
)


def encode_snapshot(store: EntityStoreInterface, created_at: Optional[str] = None) -> Dict[str, Any]:
    """
    Build a version-1 snapshot of the workspace.

    Files whose archiveStatus is not 'keep' are left out; every other
    collection is exported unfiltered. Users are not part of a backup.
    """
    data: Dict[str, Any] = {}
    for key, collection in BACKUP_KEYS:
        entities = store.get(collection)
        if collection is Collection.FILES:
            entities = [
                f for f in entities
                if f.get("archiveStatus", ArchiveStatus.KEEP.value) == ArchiveStatus.KEEP.value
            ]
        data[key] = entities
    # Legacy scalar kept in the envelope for older readers
    data[CLASSIFICATION_GOAL_KEY] = store.get_value(CLASSIFICATION_GOAL_KEY, "") or ""

    snapshot = {
        "version": BACKUP_VERSION,
        "createdAt": created_at or now_iso(),
        "data": data,
    }
    logger.info(f"Encoded snapshot with {len(data['files'])} files and {len(data['metadataTitles'])} metadata titles")
    return snapshot


def serialize_snapshot(snapshot: Dict[str, Any]) -> bytes:
    """Serialize a snapshot to UTF-8 JSON with 2-space indentation."""
    return json.dumps(snapshot, indent=2, ensure_ascii=False).encode("utf-8")


def backup_filename(now: Optional[datetime] = None) -> str:
    """Download filename for a snapshot, e.g. DocuDigitize-Backup-2024-05-01T10-00-00-000Z.json."""
    moment = now or datetime.now(timezone.utc)
    stamp = moment.strftime("%Y-%m-%dT%H-%M-%S-") + f"{moment.microsecond // 1000:03d}Z"
    return f"{BACKUP_FILENAME_PREFIX}-{stamp}.json"


def decode_snapshot(raw: Union[bytes, str]) -> BackupData:
    """
    Parse and validate a serialized snapshot.

    Args:
        raw: Serialized snapshot (UTF-8 bytes or text)

    Returns:
        Validated BackupData; absent collections are empty

    Raises:
        InvalidFormatError: If the input is not a version-1 snapshot with a data
            object, or any entity lacks its identity fields
    """
    try:
        # Tolerate a BOM from editors that add one
        text = raw.decode("utf-8-sig") if isinstance(raw, (bytes, bytearray)) else raw
        payload = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidFormatError(f"not valid JSON ({e})") from e

    if not isinstance(payload, dict):
        raise InvalidFormatError("expected a JSON object")

    version = payload.get("version")
    # 1.0 is accepted, True and "1" are not
    if isinstance(version, bool) or not isinstance(version, (int, float)) or version != BACKUP_VERSION:
        raise InvalidFormatError(f"unsupported backup version: {version!r}")

    if payload.get("data") is None:
        raise InvalidFormatError("missing 'data' section")

    try:
        snapshot = BackupSnapshot.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Snapshot validation failed: {e}")
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise InvalidFormatError(f"{location}: {first['msg']}") from e

    return snapshot.data
