import asyncio
from typing import Optional, List, Dict, Any, Callable

from .providers import AIProviderFactory, AIProvider
from .providers.base import SEARCH_OCR_LIMIT, is_auth_failure
from ..api.exceptions import AuthError, ServiceError, InvalidInputError
from ..domain.value_objects import UNKNOWN_LANGUAGE
from ..utils.validators import validate_translation_language
from ..core.logging_config import get_logger

logger = get_logger(__name__)


def normalize_extraction(raw: Dict[str, Any], metadata_titles: List[str]) -> Dict[str, Any]:
    """Coerce a provider extraction result into the stored field shapes."""
    # Only the requested fields are kept, each as a string
    raw_metadata = raw.get("metadata") if isinstance(raw.get("metadata"), dict) else {}
    return {
        "ocrText": str(raw.get("ocrText") or ""),
        "summary": str(raw.get("summary") or ""),
        "originalLanguage": str(raw.get("originalLanguage") or "").strip() or UNKNOWN_LANGUAGE,
        "metadata": {title: str(raw_metadata.get(title) or "") for title in metadata_titles},
    }


def capitalize_language(language: str) -> str:
    language = language.strip()
    if not language:
        return UNKNOWN_LANGUAGE
    return language[0].upper() + language[1:].lower()


class AIService:
    """
    AI service implementation.
    Runs provider calls off the event loop and normalizes their results.

    Credential failures surface as AuthError and set ``credentials_required``
    until a new key is configured; every other failure is a ServiceError.
    """

    def __init__(self, provider: Optional[AIProvider] = None):
        self.provider = provider or AIProviderFactory.get_provider()
        self.credentials_required = False
        logger.info(f"Initialized AIService with provider: {type(self.provider).__name__}")

    @property
    def provider_name(self) -> str:
        return type(self.provider).__name__

    def configure(self, api_key: str, provider_type: Optional[str] = None):
        """Replace the provider with one using a user-supplied API key."""
        api_key = (api_key or "").strip()
        if not api_key:
            raise InvalidInputError("API key cannot be empty")
        self.provider = AIProviderFactory.get_provider(api_key=api_key, provider_type=provider_type)
        self.credentials_required = False
        logger.info(f"AI credentials updated, provider: {self.provider_name}")

    async def _call(self, operation: str, func: Callable, *args):
        # Provider SDKs are blocking
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, func, *args)
        except AuthError as e:
            self.credentials_required = True
            logger.error(f"AI Service auth error ({operation}): {e}")
            raise
        except ServiceError as e:
            logger.error(f"AI Service Error ({operation}): {e}")
            raise
        except Exception as e:
            logger.error(f"AI Service Error ({operation}): {e}", exc_info=True)
            # Some SDK errors only reveal a bad key in their message
            if is_auth_failure(str(e)):
                self.credentials_required = True
                raise AuthError(str(e)) from e
            raise ServiceError(f"AI {operation} failed: {e}") from e

    async def extract_document(self, file_bytes: bytes, mime_type: str, metadata_titles: List[str]) -> Dict[str, Any]:
        """OCR, summarize, identify language and extract metadata for one file."""
        titles = list(metadata_titles)
        logger.debug(f"Extracting document ({mime_type}, {len(file_bytes)} bytes, {len(titles)} fields)")
        raw = await self._call("extraction", self.provider.process_document, file_bytes, mime_type, titles)
        if not isinstance(raw, dict):
            raise ServiceError("AI extraction returned an unexpected result")
        return normalize_extraction(raw, titles)

    async def translate(self, text: str, target_language: str) -> str:
        validate_translation_language(target_language)
        if not text.strip():
            return ""
        return await self._call("translation", self.provider.translate_text, text, target_language)

    async def suggest_metadata_titles(self, sample_text: str) -> List[str]:
        raw = await self._call("title suggestion", self.provider.suggest_metadata_titles, sample_text)
        return [str(title).strip() for title in raw if str(title).strip()]

    async def smart_search(self, query: str, files: List[Dict[str, Any]]) -> List[Dict[str, str]]:
        """
        Ask the AI to pick the files matching a natural-language query.

        Returns:
            [{"id", "reason"}] restricted to ids of the given files, in AI order
        """
        # OCR text is truncated to SEARCH_OCR_LIMIT characters
        documents = [
            {
                "id": f["id"],
                "filename": f.get("originalFilename", ""),
                "summary": f.get("summary", ""),
                "ocrText": (f.get("ocrText") or "")[:SEARCH_OCR_LIMIT],
                "originalLanguage": f.get("originalLanguage", ""),
            }
            for f in files
        ]
        if not documents:
            return []

        raw = await self._call("search", self.provider.smart_search, query, documents)
        # Drop unknown ids and repeats
        known_ids = {doc["id"] for doc in documents}
        results, seen = [], set()
        for item in raw:
            file_id = str(item.get("id", ""))
            if file_id in known_ids and file_id not in seen:
                seen.add(file_id)
                results.append({"id": file_id, "reason": str(item.get("reason") or "")})
        return results

    async def detect_language(self, text: str) -> str:
        raw = await self._call("language detection", self.provider.detect_language, text)
        return capitalize_language(str(raw or ""))
