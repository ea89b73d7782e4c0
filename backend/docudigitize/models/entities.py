"""
Pydantic models describing the stored entities.

Stored entities are plain dicts keyed by camelCase wire names; these models
validate them at the snapshot and HTTP boundaries. Unknown keys are kept so
that legacy fields survive a backup round trip.
"""
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any

from ..domain.value_objects import ArchiveStatus


def _metadata_value(item: Any) -> Any:
    if item is None:
        return ""
    if isinstance(item, (int, float)) and not isinstance(item, bool):
        return str(item)
    return item


class StoredEntity(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_record(self) -> Dict[str, Any]:
        """
        Dump to the camelCase dict form kept by the entity store.

        Keys present in the input are kept even when null; absent optional
        keys stay absent and absent defaulted keys are filled in.
        """
        record = self.model_dump(by_alias=True, mode="json")
        for name, field in type(self).model_fields.items():
            key = field.alias or to_camel(name)
            if name not in self.model_fields_set and record.get(key) is None:
                record.pop(key, None)
        return record


class DigitizedFile(StoredEntity):
    id: str
    original_filename: str = ""
    content_hash: str
    ocr_text: str = ""
    summary: str = ""
    translation_en: Optional[str] = None
    translation_gr: Optional[str] = None
    original_language: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict)
    created_at: Optional[str] = None
    uploaded_by: Optional[str] = None
    archive_status: ArchiveStatus = ArchiveStatus.KEEP

    @field_validator("original_filename", "ocr_text", "summary", "archive_status", "metadata", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        # Older snapshots write null for fields they never filled in
        if value is None:
            field = cls.model_fields[info.field_name]
            return field.get_default(call_default_factory=True)
        if info.field_name == "metadata" and isinstance(value, dict):
            return {key: _metadata_value(item) for key, item in value.items()}
        return value


class MetadataTitle(StoredEntity):
    id: str
    name: str


class MetadataRawInput(StoredEntity):
    id: str
    pasted_text: str = ""
    created_at: Optional[str] = None

    @field_validator("pasted_text", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class MetadataSettingsSnapshot(StoredEntity):
    id: Optional[str] = None  # absent on snapshots written by older versions
    saved_at: Optional[str] = None
    metadata_titles: List[MetadataTitle] = Field(default_factory=list)

    @field_validator("metadata_titles", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class User(StoredEntity):
    name: str
