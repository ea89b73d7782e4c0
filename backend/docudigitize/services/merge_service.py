"""
Merge Service - additive import of a backup snapshot.

Merging never removes or changes an existing entity. The snapshot is decoded
and every addition is computed against the live state before the first write,
so an invalid snapshot leaves the workspace untouched and a second merge of
the same snapshot adds nothing.
"""
import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from ..api.exceptions import PersistenceError
from ..domain.value_objects import Collection
from ..models.backup import BackupData
from ..utils.document_utils import name_index, name_key
from .autosave_service import AutosaveService
from .database.base import EntityStoreInterface
from .snapshot_codec import decode_snapshot
from ..core.logging_config import get_logger

logger = get_logger(__name__)

# Append-only history collections merged by id (or by content when ids are missing)
HISTORY_COLLECTIONS = (
    Collection.METADATA_RAW_INPUTS,
    Collection.METADATA_SETTINGS_HISTORY,
    Collection.CATEGORY_RAW_INPUTS,
    Collection.CATEGORY_SETTINGS_HISTORY,
    Collection.CLASSIFICATION_GOAL_HISTORY,
)

SUMMARY_LABELS = {
    Collection.FILES: "files",
    Collection.METADATA_TITLES: "metadata titles",
    Collection.METADATA_RAW_INPUTS: "metadata generation history entries",
    Collection.METADATA_SETTINGS_HISTORY: "metadata settings snapshots",
    Collection.CATEGORY_RAW_INPUTS: "category generation history entries",
    Collection.CATEGORY_SETTINGS_HISTORY: "category settings snapshots",
    Collection.CLASSIFICATION_GOAL_HISTORY: "classification goal history entries",
}

# Always listed in the summary, even when nothing was added
SUMMARY_ALWAYS = (Collection.FILES, Collection.METADATA_TITLES, Collection.METADATA_RAW_INPUTS)


@dataclass
class MergeResult:
    """Counts of entities added per collection plus any persistence warnings."""
    added: Dict[Collection, int] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def total_added(self) -> int:
        return sum(self.added.values())

    @property
    def nothing_to_merge(self) -> bool:
        return self.total_added == 0

    def summary(self) -> str:
        if self.nothing_to_merge:
            return "Merge complete. No new data was found to add."
        lines = ["Merge complete! Added:"]
        for collection, label in SUMMARY_LABELS.items():
            count = self.added.get(collection, 0)
            if count or collection in SUMMARY_ALWAYS:
                lines.append(f"- {count} new {label}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "added": {collection.value: count for collection, count in self.added.items()},
            "nothingToMerge": self.nothing_to_merge,
            "message": self.summary(),
            "warnings": list(self.warnings),
        }


class MergeService:
    """Merges snapshots into the live workspace."""

    def __init__(self, store: EntityStoreInterface, autosave: Optional[AutosaveService] = None):
        self.store = store
        self.autosave = autosave

    def merge(self, raw: Union[bytes, str]) -> MergeResult:
        """
        Decode a serialized snapshot and merge it.

        Raises:
            InvalidFormatError: If the snapshot is invalid (nothing is written)
        """
        data = decode_snapshot(raw)
        return self.merge_data(data)

    def merge_data(self, data: BackupData) -> MergeResult:
        incoming = data.to_collections()
        result = MergeResult()

        # Plan every addition before the first write
        plans: List[Tuple[Collection, List[Dict[str, Any]], List[Dict[str, Any]]]] = []
        live_files, new_files = self._new_files(incoming[Collection.FILES])
        plans.append((Collection.FILES, live_files, new_files))
        live_titles, new_titles = self._new_titles(incoming[Collection.METADATA_TITLES])
        plans.append((Collection.METADATA_TITLES, live_titles, new_titles))
        for collection in HISTORY_COLLECTIONS:
            live, new = self._new_history_entries(collection, incoming[collection])
            plans.append((collection, live, new))

        for collection, live, new in plans:
            result.added[collection] = len(new)
            if not new:
                continue
            # New entries are appended after the live ones
            combined = live + new
            if collection is Collection.METADATA_TITLES and self.autosave is not None:
                self.autosave.reset_baseline(combined)
            try:
                self.store.replace_all(collection, combined)
            except PersistenceError as e:
                result.warnings.append(str(e))

        logger.info(f"Merge finished: {result.total_added} entities added")
        return result

    def _new_files(self, incoming: List[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        live = self.store.get(Collection.FILES)
        live_hashes = {f.get("contentHash") for f in live}
        used_ids = {f.get("id") for f in live}
        new = []
        for entry in incoming:
            # Only live files count; copies inside one snapshot are all kept
            if entry["contentHash"] in live_hashes:
                continue
            if entry["id"] in used_ids:
                entry = {**entry, "id": str(uuid.uuid4())}
                logger.info(f"Imported file '{entry.get('originalFilename')}' re-keyed, its id was already in use")
            used_ids.add(entry["id"])
            new.append(entry)
        return live, new

    def _new_titles(self, incoming: List[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        live = self.store.get(Collection.METADATA_TITLES)
        known = name_index(live)
        used_ids = {t.get("id") for t in live}
        new = []
        for entry in incoming:
            key = name_key(entry["name"])
            if key in known:
                continue
            # Re-key instead of dropping a title whose id is taken
            if entry["id"] in used_ids:
                entry = {**entry, "id": str(uuid.uuid4())}
            known[key] = entry
            used_ids.add(entry["id"])
            new.append(entry)
        return live, new

    def _new_history_entries(
        self, collection: Collection, incoming: List[Dict[str, Any]]
    ) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        live = self.store.get(collection)
        seen = {self._history_key(entry) for entry in live}
        new = []
        unkeyed = 0
        for entry in incoming:
            key = self._history_key(entry)
            if key[0] == "content":
                unkeyed += 1
            if key in seen:
                continue
            seen.add(key)
            new.append(entry)
        if unkeyed:
            logger.warning(
                f"{unkeyed} {collection.value} entries have no id; matched by content instead"
            )
        return live, new

    @staticmethod
    def _history_key(entry: Dict[str, Any]) -> Tuple[str, str]:
        entry_id = entry.get("id")
        if entry_id:
            return ("id", str(entry_id))
        return ("content", json.dumps(entry, sort_keys=True, ensure_ascii=False))
