"""
Abstract base class for entity stores.
All store implementations must inherit from this class.
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from ...domain.value_objects import Collection

ChangeListener = Callable[[Collection], None]


class EntityStoreInterface(ABC):
    """
    Abstract interface for the local entity store.

    Collections are ordered lists of plain dicts. All operations are synchronous
    and a write has been persisted (or has failed with PersistenceError) by the
    time it returns. Listeners registered with subscribe() are notified after
    every write.
    """

    @abstractmethod
    def get(self, collection: Collection) -> List[Dict[str, Any]]:
        """Return a copy of the collection (empty if it was never written)."""
        pass

    @abstractmethod
    def replace_all(self, collection: Collection, entities: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Overwrite a whole collection."""
        pass

    @abstractmethod
    def create(self, collection: Collection, entity: Dict[str, Any]) -> Dict[str, Any]:
        """Append an entity, assigning a fresh id where the collection uses ids."""
        pass

    @abstractmethod
    def update(self, collection: Collection, entity_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow-merge fields into an entity. Raises NotFoundError if absent."""
        pass

    @abstractmethod
    def delete(self, collection: Collection, entity_id: str) -> bool:
        """Remove an entity. Returns False if it did not exist."""
        pass

    @abstractmethod
    def find_file_by_content_hash(self, content_hash: str) -> Optional[Dict[str, Any]]:
        """Find the first digitized file with the given content hash."""
        pass

    @abstractmethod
    def exists(self, collection: Collection) -> bool:
        """Whether the collection has ever been written."""
        pass

    @abstractmethod
    def get_value(self, key: str, default: Any = None) -> Any:
        """Read a scalar setting."""
        pass

    @abstractmethod
    def set_value(self, key: str, value: Any) -> Any:
        """Write a scalar setting."""
        pass

    @abstractmethod
    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unregisters it."""
        pass

    @abstractmethod
    def initialize(self):
        """Load persisted state."""
        pass

    @abstractmethod
    def close(self):
        """Release resources."""
        pass

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Entity counts per collection."""
        pass
