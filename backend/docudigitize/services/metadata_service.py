"""
Metadata field service - manages the ordered list of metadata field
definitions, the pasted-text history and AI field suggestions.

Field names are unique case-insensitively. Every change to the list goes
through the store, so the autosave service sees it.
"""
import uuid
from typing import Any, Dict, List, Optional

from ..api.exceptions import DuplicateEntryError, InvalidInputError, NotFoundError
from ..domain.value_objects import Collection
from ..utils.document_utils import name_index, name_key, now_iso
from ..utils.validators import validate_name
from .ai_service import AIService
from .database.base import EntityStoreInterface
from ..core.logging_config import get_logger

logger = get_logger(__name__)


class MetadataService:

    def __init__(self, store: EntityStoreInterface, ai_service: Optional[AIService] = None):
        self.store = store
        self.ai_service = ai_service

    # Field definitions
    def list_titles(self) -> List[Dict[str, Any]]:
        return self.store.get(Collection.METADATA_TITLES)

    def add_title(self, name: str) -> Dict[str, Any]:
        name = validate_name(name, "Metadata title")
        if name_key(name) in name_index(self.list_titles()):
            raise DuplicateEntryError(f"Metadata title already exists: {name}")
        title = self.store.create(Collection.METADATA_TITLES, {"name": name})
        logger.info(f"Added metadata title '{name}'")
        return title

    def rename_title(self, title_id: str, name: str) -> Dict[str, Any]:
        name = validate_name(name, "Metadata title")
        existing = name_index(self.list_titles()).get(name_key(name))
        if existing is not None and existing.get("id") != title_id:
            raise DuplicateEntryError(f"Metadata title already exists: {name}")
        return self.store.update(Collection.METADATA_TITLES, title_id, {"name": name})

    def delete_title(self, title_id: str) -> bool:
        if not self.store.delete(Collection.METADATA_TITLES, title_id):
            raise NotFoundError(f"Metadata title not found: {title_id}")
        return True

    def replace_titles(self, titles: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Replace the whole ordered list (reorder, bulk edit). Entries without an id get one."""
        cleaned, seen_names, seen_ids = [], set(), set()
        for title in titles:
            name = validate_name(title.get("name"), "Metadata title")
            key = name_key(name)
            if key in seen_names:
                raise DuplicateEntryError(f"Metadata title listed twice: {name}")
            # New entries from the client have no id yet
            title_id = title.get("id") or str(uuid.uuid4())
            if title_id in seen_ids:
                raise InvalidInputError(f"Metadata title id listed twice: {title_id}")
            seen_names.add(key)
            seen_ids.add(title_id)
            cleaned.append({**title, "id": title_id, "name": name})
        return self.store.replace_all(Collection.METADATA_TITLES, cleaned)

    # Pasted-text history
    def list_raw_inputs(self) -> List[Dict[str, Any]]:
        """Pasted samples, newest first."""
        return sorted(
            self.store.get(Collection.METADATA_RAW_INPUTS),
            key=lambda entry: entry.get("createdAt") or "",
            reverse=True
        )

    def add_raw_input(self, pasted_text: str) -> Dict[str, Any]:
        return self.store.create(
            Collection.METADATA_RAW_INPUTS,
            {"pastedText": pasted_text, "createdAt": now_iso()}
        )

    def list_settings_history(self) -> List[Dict[str, Any]]:
        return self.store.get(Collection.METADATA_SETTINGS_HISTORY)

    # AI suggestions
    async def suggest_titles(self, sample_text: str, record_input: bool = True) -> Dict[str, Any]:
        """
        Ask the AI for field names matching a sample text and append the new ones.

        Args:
            sample_text: Pasted document sample
            record_input: Log the sample in the raw-input history (False when
                regenerating from an existing history entry)

        Returns:
            {"added": [new titles], "suggested": [all suggested names]}
        """
        if not (sample_text or "").strip():
            raise InvalidInputError("Sample text cannot be empty")
        if record_input:
            self.add_raw_input(sample_text)

        suggested = await self.ai_service.suggest_metadata_titles(sample_text)

        # Suggestions matching an existing name, in any case, are ignored
        live = self.list_titles()
        known = name_index(live)
        added = []
        for name in suggested:
            key = name_key(name)
            if key in known:
                continue
            title = {"id": str(uuid.uuid4()), "name": name.strip()}
            known[key] = title
            added.append(title)

        # Single write for all new titles
        if added:
            self.store.replace_all(Collection.METADATA_TITLES, live + added)
        logger.info(f"AI suggested {len(suggested)} metadata titles, {len(added)} new")
        return {"added": added, "suggested": suggested}
