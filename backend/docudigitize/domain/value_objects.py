"""
Value Objects - Immutable objects that represent domain concepts.
These have no identity and are compared by value.
"""
from enum import Enum
from typing import NewType

# Value objects for type safety and domain clarity
ContentHash = NewType("ContentHash", str)

# Sentinel language values stored in DigitizedFile.originalLanguage
UNKNOWN_LANGUAGE = "Άγνωστη"
LANGUAGE_ERROR = "Σφάλμα"

# Scalar value kept alongside the collections (legacy classification goal)
CLASSIFICATION_GOAL_KEY = "classificationGoal"


class ArchiveStatus(str, Enum):
    """Whether a file is included in backups and spreadsheet exports."""
    KEEP = "keep"
    EXCLUDE = "exclude"


class Collection(str, Enum):
    """
    Named collections held by the entity store.

    The value doubles as the on-disk file stem of the JSON store.
    """
    FILES = "digitizedFiles"
    METADATA_TITLES = "metadataTitles"
    METADATA_RAW_INPUTS = "metadataRawInputs"
    METADATA_SETTINGS_HISTORY = "metadataSettingsHistory"
    USERS = "savedUsers"
    # Legacy placeholders, carried only for backup compatibility
    CATEGORIES = "categories"
    CATEGORY_RAW_INPUTS = "categoryRawInputs"
    CATEGORY_SETTINGS_HISTORY = "categorySettingsHistory"
    CLASSIFICATION_GOAL_HISTORY = "classificationGoalHistory"

    @property
    def identity_field(self) -> str:
        """Field that identifies an entity within this collection."""
        return "name" if self is Collection.USERS else "id"

    @property
    def assigns_ids(self) -> bool:
        """Whether create() generates an id for new entities."""
        return self not in (Collection.USERS, Collection.CATEGORY_SETTINGS_HISTORY)
