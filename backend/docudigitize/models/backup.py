"""
Backup snapshot envelope models (format version 1).
"""
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any

from .entities import DigitizedFile, MetadataTitle, MetadataRawInput, MetadataSettingsSnapshot
from ..domain.value_objects import Collection


class BackupData(BaseModel):
    """Collections carried by a snapshot. Absent or null collections decode as empty."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    files: List[DigitizedFile] = Field(default_factory=list)
    metadata_titles: List[MetadataTitle] = Field(default_factory=list)
    metadata_raw_inputs: List[MetadataRawInput] = Field(default_factory=list)
    metadata_settings_history: List[MetadataSettingsSnapshot] = Field(default_factory=list)
    categories: List[Dict[str, Any]] = Field(default_factory=list)
    category_raw_inputs: List[Dict[str, Any]] = Field(default_factory=list)
    category_settings_history: List[Dict[str, Any]] = Field(default_factory=list)
    classification_goal: str = ""
    classification_goal_history: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return "" if info.field_name == "classification_goal" else []
        return value

    def to_collections(self) -> Dict[Collection, List[Dict[str, Any]]]:
        """Plain store records per collection, in snapshot order."""
        return {
            Collection.FILES: [f.to_record() for f in self.files],
            Collection.METADATA_TITLES: [t.to_record() for t in self.metadata_titles],
            Collection.METADATA_RAW_INPUTS: [r.to_record() for r in self.metadata_raw_inputs],
            Collection.METADATA_SETTINGS_HISTORY: [s.to_record() for s in self.metadata_settings_history],
            Collection.CATEGORIES: list(self.categories),
            Collection.CATEGORY_RAW_INPUTS: list(self.category_raw_inputs),
            Collection.CATEGORY_SETTINGS_HISTORY: list(self.category_settings_history),
            Collection.CLASSIFICATION_GOAL_HISTORY: list(self.classification_goal_history),
        }


class BackupSnapshot(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    version: int
    created_at: Optional[str] = None
    data: BackupData
