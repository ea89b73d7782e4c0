"""
Data Transfer Objects (DTOs) for API layer.
Separates API contracts from stored entities.
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Literal


class FileUpdateRequest(BaseModel):
    """Reviewed edits to a digitized file."""
    ocr_text: Optional[str] = None
    summary: Optional[str] = None
    translation_en: Optional[str] = None
    translation_gr: Optional[str] = None
    original_language: Optional[str] = None
    metadata: Optional[Dict[str, str]] = None

    def to_fields(self) -> Dict:
        return {
            "ocrText": self.ocr_text,
            "summary": self.summary,
            "translationEn": self.translation_en,
            "translationGr": self.translation_gr,
            "originalLanguage": self.original_language,
            "metadata": self.metadata,
        }


class ArchiveStatusRequest(BaseModel):
    archive_status: Literal["keep", "exclude"]


class TranslateRequest(BaseModel):
    target_language: Literal["English", "Greek"]


class FileSelectionRequest(BaseModel):
    file_ids: List[str] = Field(default_factory=list)


class ExportRequest(BaseModel):
    file_ids: List[str]
    format: Literal["txt", "csv", "xlsx"] = "txt"


class SmartSearchRequest(BaseModel):
    query: str


class MetadataTitleRequest(BaseModel):
    name: str


class MetadataTitleItem(BaseModel):
    id: Optional[str] = None
    name: str


class MetadataTitlesReplaceRequest(BaseModel):
    titles: List[MetadataTitleItem]


class TitleSuggestionRequest(BaseModel):
    text: str
    record_input: bool = True


class UserRequest(BaseModel):
    name: str


class ApiKeyRequest(BaseModel):
    api_key: str
    provider: Optional[Literal["anthropic", "openrouter"]] = None


class DuplicateDecisionRequest(BaseModel):
    replace: bool


class CommitUploadRequest(BaseModel):
    """Reviewed extraction values for the current upload."""
    uploaded_by: str
    metadata: Optional[Dict[str, str]] = None
    ocr_text: Optional[str] = None
    summary: Optional[str] = None
    original_language: Optional[str] = None

    def overrides(self) -> Dict:
        return {
            "ocrText": self.ocr_text,
            "summary": self.summary,
            "originalLanguage": self.original_language,
        }
