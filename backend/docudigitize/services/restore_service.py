"""
Restore Service - destructive replacement of the workspace from a snapshot.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..api.exceptions import PersistenceError
from ..domain.value_objects import Collection, CLASSIFICATION_GOAL_KEY
from ..models.backup import BackupData
from .autosave_service import AutosaveService
from .database.base import EntityStoreInterface
from .snapshot_codec import decode_snapshot
from ..core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class RestoreResult:
    restored: Dict[Collection, int] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "restored": {collection.value: count for collection, count in self.restored.items()},
            "message": "Workspace restored from backup.",
            "warnings": list(self.warnings),
        }


class RestoreService:
    """
    Replaces every backup collection with a snapshot's contents.

    Users are not part of a backup and are left alone. Callers are
    responsible for obtaining the user's confirmation first.
    """

    def __init__(self, store: EntityStoreInterface, autosave: Optional[AutosaveService] = None):
        self.store = store
        self.autosave = autosave

    def restore(self, raw: Union[bytes, str]) -> RestoreResult:
        """
        Decode a serialized snapshot and restore it.

        Raises:
            InvalidFormatError: If the snapshot is invalid (nothing is written)
        """
        data = decode_snapshot(raw)
        return self.restore_data(data)

    def restore_data(self, data: BackupData) -> RestoreResult:
        collections = data.to_collections()
        result = RestoreResult()

        # Restored titles are the new saved state, not a pending edit
        if self.autosave is not None:
            self.autosave.reset_baseline(collections[Collection.METADATA_TITLES])

        # Each collection is written on its own; a failed write becomes a warning
        for collection, entities in collections.items():
            result.restored[collection] = len(entities)
            try:
                self.store.replace_all(collection, entities)
            except PersistenceError as e:
                result.warnings.append(str(e))
        # Legacy scalar, restored as is
        try:
            self.store.set_value(CLASSIFICATION_GOAL_KEY, data.classification_goal)
        except PersistenceError as e:
            result.warnings.append(str(e))

        logger.info(
            f"Restored workspace: {result.restored[Collection.FILES]} files, "
            f"{result.restored[Collection.METADATA_TITLES]} metadata titles"
        )
        return result
