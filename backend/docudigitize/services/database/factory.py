"""
Store Factory for creating entity store adapters.
Implements Factory Pattern for plug-and-play persistence.
"""
from pathlib import Path
from typing import Optional

from .base import EntityStoreInterface
from .memory_adapter import MemoryStore
from .json_adapter import JSONStore
from ...core.config import STORE_TYPE
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class StoreFactory:
    """
    Factory for creating entity stores.
    Supports JSON (file-based) and Memory (in-memory) backends.
    """

    @staticmethod
    def create(store_type: Optional[str] = None, **kwargs) -> EntityStoreInterface:
        """
        Create an entity store instance.

        Args:
            store_type: Type of store ('json', 'memory', or None for STORE_TYPE)
            **kwargs: Additional arguments for specific stores

        Returns:
            EntityStoreInterface instance

        Examples:
            # JSON (file-based, persistent)
            store = StoreFactory.create('json', data_dir=Path('data/workspace'))

            # Memory (in-memory, non-persistent)
            store = StoreFactory.create('memory')
        """
        store_type = (store_type or STORE_TYPE).lower()

        if store_type == "json":
            data_dir = kwargs.get("data_dir")
            if data_dir:
                data_dir = Path(data_dir) if isinstance(data_dir, str) else data_dir
            return JSONStore(data_dir=data_dir)
        elif store_type == "memory":
            return MemoryStore()
        else:
            raise ValueError(
                f"Unsupported store type: {store_type}. "
                f"Supported types: 'json', 'memory'"
            )

    @staticmethod
    def create_and_initialize(store_type: Optional[str] = None, **kwargs) -> EntityStoreInterface:
        """Create a store and load its persisted state."""
        store = StoreFactory.create(store_type, **kwargs)
        store.initialize()
        return store
