"""
In-memory entity store implementing EntityStoreInterface.
Perfect for demos and testing - stores all collections in Python lists.
Data is lost on restart unless a subclass persists it.
"""
from typing import Any, Callable, Dict, List, Optional, Union
from threading import RLock
import copy
import uuid

from .base import EntityStoreInterface, ChangeListener
from ...api.exceptions import NotFoundError, PersistenceError
from ...domain.value_objects import Collection
from ...core.logging_config import get_logger

logger = get_logger(__name__)

WriteTarget = Union[Collection, str]


class MemoryStore(EntityStoreInterface):
    """
    In-memory entity store.

    Every read returns deep copies so callers can never mutate stored state.
    Subclasses persist by overriding _persist(); a failed persist keeps the
    in-memory change, still notifies listeners, then raises PersistenceError.
    """

    def __init__(self):
        # Entity lists per collection, in insertion order
        self._collections: Dict[Collection, List[Dict[str, Any]]] = {}
        self._values: Dict[str, Any] = {}  # scalar settings, e.g. classificationGoal
        self._listeners: List[ChangeListener] = []
        self._lock = RLock()

    def initialize(self):
        """Reset to an empty workspace."""
        with self._lock:
            self._collections.clear()
            self._values.clear()

    def close(self):
        """No resources to release in memory."""
        pass

    # Reads
    def get(self, collection: Collection) -> List[Dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._collections.get(collection, []))

    def exists(self, collection: Collection) -> bool:
        with self._lock:
            return collection in self._collections

    def find_file_by_content_hash(self, content_hash: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            for entity in self._collections.get(Collection.FILES, []):
                if entity.get("contentHash") == content_hash:
                    return copy.deepcopy(entity)
        return None

    def get_value(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return copy.deepcopy(self._values.get(key, default))

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {collection.value: len(self._collections.get(collection, [])) for collection in Collection}

    # Writes
    def replace_all(self, collection: Collection, entities: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        with self._lock:
            self._collections[collection] = copy.deepcopy(list(entities))
            result = copy.deepcopy(self._collections[collection])
            return self._commit(collection, result)

    def create(self, collection: Collection, entity: Dict[str, Any]) -> Dict[str, Any]:
        record = copy.deepcopy(entity)
        # Ids are always generated here, never taken from the caller
        if collection.assigns_ids:
            record["id"] = str(uuid.uuid4())
        elif collection is Collection.USERS and not record.get("name"):
            raise ValueError("User must have a 'name' field")

        with self._lock:
            self._collections.setdefault(collection, []).append(record)
            return self._commit(collection, copy.deepcopy(record))

    def update(self, collection: Collection, entity_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        identity = collection.identity_field
        with self._lock:
            entity = self._find(collection, entity_id)
            if entity is None:
                raise NotFoundError(f"No entry '{entity_id}' in {collection.value}")
            # The identity field is never overwritten
            entity.update({k: v for k, v in copy.deepcopy(fields).items() if k != identity})
            return self._commit(collection, copy.deepcopy(entity))

    def delete(self, collection: Collection, entity_id: str) -> bool:
        with self._lock:
            entity = self._find(collection, entity_id)
            if entity is None:
                return False
            self._collections[collection].remove(entity)
            self._commit(collection, True)
            return True

    def set_value(self, key: str, value: Any) -> Any:
        with self._lock:
            self._values[key] = copy.deepcopy(value)
            return self._commit(key, copy.deepcopy(value))

    # Change notification
    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, target: WriteTarget):
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(target)
            except Exception as e:
                logger.error(f"Store listener failed for {target}: {e}", exc_info=True)

    # Internals
    def _find(self, collection: Collection, entity_id: str) -> Optional[Dict[str, Any]]:
        identity = collection.identity_field
        for entity in self._collections.get(collection, []):
            if entity.get(identity) == entity_id:
                return entity
        return None

    def _commit(self, target: WriteTarget, result: Any) -> Any:
        error = None
        try:
            self._persist(target)
        except OSError as e:
            name = target.value if isinstance(target, Collection) else target
            logger.error(f"Could not persist {name}: {e}")
            error = PersistenceError(f"could not write {name} to disk ({e})", result=result)

        # Listeners hear about the change even when the disk write failed
        self._notify(target)
        if error is not None:
            raise error
        return result

    def _persist(self, target: WriteTarget):
        """Write the target to durable storage (no-op in memory)."""
        pass
