"""
User service - the list of known uploader names.
"""
from typing import Any, Dict, List, Tuple

from ..api.exceptions import NotFoundError
from ..domain.value_objects import Collection
from ..models.entities import User
from ..utils.document_utils import name_index, name_key
from ..utils.validators import validate_name
from .database.base import EntityStoreInterface
from ..core.logging_config import get_logger

logger = get_logger(__name__)


class UserService:
    """Users are identified by name, unique case-insensitively."""

    def __init__(self, store: EntityStoreInterface):
        self.store = store

    def list_users(self) -> List[Dict[str, Any]]:
        return self.store.get(Collection.USERS)

    def add_user(self, name: str) -> Tuple[Dict[str, Any], bool]:
        """
        Add a user unless one with the same name (ignoring case) exists.

        Returns:
            (user, created) - the existing user and False on a duplicate
        """
        name = validate_name(name, "User name")
        # "maria" and "Maria" are the same user
        existing = name_index(self.list_users()).get(name_key(name))
        if existing is not None:
            return existing, False
        user = self.store.create(Collection.USERS, User(name=name).to_record())
        logger.info(f"Added user '{name}'")
        return user, True

    def delete_user(self, name: str) -> bool:
        if not self.store.delete(Collection.USERS, name):
            raise NotFoundError(f"User not found: {name}")
        return True

    def login(self, name: str) -> Dict[str, Any]:
        """Select the active user, registering the name on first use."""
        user, created = self.add_user(name)
        logger.info(f"User '{user['name']}' logged in{' (new)' if created else ''}")
        return user
