"""
JSON file-based entity store.
Stores each collection in its own JSON file - data persists between restarts,
no database setup needed.
"""
import json
from pathlib import Path
from typing import Optional
from threading import Lock

from .memory_adapter import MemoryStore, WriteTarget
from ...core.config import DATA_DIR
from ...domain.value_objects import Collection
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class JSONStore(MemoryStore):
    """
    JSON file-backed entity store.

    Collections live in ``<data_dir>/<collection>.json``; scalar values in
    ``<data_dir>/settings.json``. Every write replaces the whole file through
    a temp file + rename so a crash never leaves a half-written collection.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize JSON store.

        Args:
            data_dir: Directory for the JSON files (defaults to DATA_DIR)
        """
        super().__init__()
        self.data_dir = Path(data_dir) if data_dir is not None else DATA_DIR
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.values_file = self.data_dir / "settings.json"

        # Lock for thread-safe file operations
        self._file_lock = Lock()

    def collection_file(self, collection: Collection) -> Path:
        return self.data_dir / f"{collection.value}.json"

    def initialize(self):
        """Load all collections and scalar values from disk."""
        super().initialize()
        with self._lock:
            for collection in Collection:
                path = self.collection_file(collection)
                if not path.exists():
                    continue
                # Unreadable or non-list files load as an empty collection
                data = self._load_json(path)
                if isinstance(data, list):
                    self._collections[collection] = data
                elif data is not None:
                    logger.warning(f"Ignoring {path.name}: expected a JSON array")

            values = self._load_json(self.values_file) if self.values_file.exists() else None
            if isinstance(values, dict):
                self._values.update(values)

        logger.info(f"Loaded JSON store from {self.data_dir}: {self.get_stats()}")

    def _load_json(self, path: Path):
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load {path.name}: {e}")
            return None

    def _persist(self, target: WriteTarget):
        # Collections and scalar values live in separate files
        if isinstance(target, Collection):
            self._write_json(self.collection_file(target), self._collections.get(target, []))
        else:
            self._write_json(self.values_file, self._values)

    def _write_json(self, path: Path, payload):
        with self._file_lock:
            # Atomic write using temp file + rename
            temp_file = path.with_suffix('.tmp')
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            temp_file.replace(path)
