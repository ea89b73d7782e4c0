"""
File service - operations on digitized files after upload.
"""
from typing import Any, Dict, List, Optional

from ..api.exceptions import AuthError, InvalidInputError, NotFoundError, ServiceError
from ..domain.value_objects import Collection, LANGUAGE_ERROR
from ..utils.validators import validate_archive_status, validate_translation_language
from .ai_service import AIService
from .database.base import EntityStoreInterface
from ..core.logging_config import get_logger

logger = get_logger(__name__)

EDITABLE_FIELDS = ("ocrText", "summary", "translationEn", "translationGr", "originalLanguage", "metadata")
TRANSLATION_FIELDS = {"English": "translationEn", "Greek": "translationGr"}


class FileService:
    """Reads, edits, translates and re-classifies stored files."""

    def __init__(self, store: EntityStoreInterface, ai_service: Optional[AIService] = None):
        self.store = store
        self.ai_service = ai_service

    def list_files(self, archive_status: Optional[str] = None) -> List[Dict[str, Any]]:
        files = self.store.get(Collection.FILES)
        if archive_status is not None:
            status = validate_archive_status(archive_status).value
            files = [f for f in files if f.get("archiveStatus") == status]
        return files

    def get_file(self, file_id: str) -> Dict[str, Any]:
        for entity in self.store.get(Collection.FILES):
            if entity.get("id") == file_id:
                return entity
        raise NotFoundError(f"File not found: {file_id}")

    def get_files(self, file_ids: List[str]) -> List[Dict[str, Any]]:
        """Files for the given ids, in the given order. Unknown ids raise NotFoundError."""
        by_id = {f["id"]: f for f in self.store.get(Collection.FILES)}
        missing = [file_id for file_id in file_ids if file_id not in by_id]
        if missing:
            raise NotFoundError(f"Files not found: {', '.join(missing)}")
        return [by_id[file_id] for file_id in file_ids]

    def update_file(self, file_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Apply reviewed edits. Identity, hash and provenance fields cannot be edited."""
        # None means "leave unchanged"
        changes = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS and v is not None}
        if not changes:
            raise InvalidInputError(f"Nothing to update; editable fields are: {', '.join(EDITABLE_FIELDS)}")
        return self.store.update(Collection.FILES, file_id, changes)

    def set_archive_status(self, file_id: str, archive_status: str) -> Dict[str, Any]:
        status = validate_archive_status(archive_status)
        return self.store.update(Collection.FILES, file_id, {"archiveStatus": status.value})

    def delete_file(self, file_id: str) -> bool:
        deleted = self.store.delete(Collection.FILES, file_id)
        if not deleted:
            raise NotFoundError(f"File not found: {file_id}")
        logger.info(f"Deleted file {file_id}")
        return deleted

    async def translate_file(self, file_id: str, target_language: str) -> Dict[str, Any]:
        """Translate a file's OCR text and store it in translationEn / translationGr."""
        validate_translation_language(target_language)
        entity = self.get_file(file_id)
        translation = await self.ai_service.translate(entity.get("ocrText", ""), target_language)
        return self.store.update(Collection.FILES, file_id, {TRANSLATION_FIELDS[target_language]: translation})

    async def re_evaluate_languages(self, file_ids: List[str]) -> Dict[str, Any]:
        """
        Re-run language identification for the selected files, one at a time.

        A per-file AI failure marks that file with the error sentinel and the
        batch continues; a credential failure stops the batch immediately.

        Raises:
            AuthError: Credentials rejected; files processed so far keep their new value
        """
        if not file_ids:
            raise InvalidInputError("No files selected for language re-evaluation")
        files = self.get_files(file_ids)

        updated, failed = [], []
        for entity in files:
            try:
                language = await self.ai_service.detect_language(entity.get("ocrText", ""))
            except AuthError:
                logger.error(f"Language re-evaluation halted after {len(updated) + len(failed)} file(s)")
                raise
            except ServiceError as e:
                logger.warning(f"Language re-evaluation failed for {entity['id']}: {e}")
                language = LANGUAGE_ERROR
                failed.append(entity["id"])
            else:
                updated.append(entity["id"])
            # Written per file so an auth failure keeps earlier results
            self.store.update(Collection.FILES, entity["id"], {"originalLanguage": language})

        logger.info(f"Language re-evaluation done: {len(updated)} updated, {len(failed)} failed")
        return {"total": len(files), "updated": updated, "failed": failed}

    async def smart_search(self, query: str) -> List[Dict[str, Any]]:
        """Natural-language search over all files; results carry the matched file and a reason."""
        query = (query or "").strip()
        if not query:
            raise InvalidInputError("Search query cannot be empty")
        files = self.store.get(Collection.FILES)
        matches = await self.ai_service.smart_search(query, files)
        # The AI only sees trimmed copies; answer with the stored records
        by_id = {f["id"]: f for f in files}
        return [{"file": by_id[m["id"]], "reason": m["reason"]} for m in matches]
