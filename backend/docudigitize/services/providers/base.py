"""
Base AI Provider Interface.

All AI providers must inherit from AIProvider and implement all abstract
methods. Providers backed by a chat-completion SDK inherit PromptedProvider
and only implement ``complete``.
"""
from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any
import base64
import json
import re

from ...api.exceptions import ServiceError

# Substrings that identify a rejected credential in SDK error messages
AUTH_ERROR_MARKERS = ("api key not valid", "permission denied", "api_key_invalid", "invalid x-api-key", "invalid api key")

# Characters of OCR text sent per document in a search prompt
SEARCH_OCR_LIMIT = 1000
LANGUAGE_SAMPLE_LIMIT = 2000  # characters sent for language detection


class AIProvider(ABC):
    """
    Abstract base class for AI providers.

    Each AI provider implements the document operations of the workspace.
    Implementations are synchronous; AIService runs them in an executor.
    """

    @abstractmethod
    def process_document(self, file_bytes: bytes, mime_type: str, metadata_titles: List[str]) -> Dict[str, Any]:
        """
        Run OCR, language identification, Greek summarization and metadata
        extraction on a document image or PDF.

        Args:
            file_bytes: Raw file content
            mime_type: image/png, image/jpeg or application/pdf
            metadata_titles: Field names to extract values for

        Returns:
            Dict with ocrText, summary, originalLanguage and metadata
        """
        pass

    @abstractmethod
    def translate_text(self, text: str, target_language: str) -> str:
        """
        Translate text to English or Greek.

        Returns:
            Translated text only
        """
        pass

    @abstractmethod
    def suggest_metadata_titles(self, sample_text: str) -> List[str]:
        """
        Suggest metadata field names (in Greek) for a sample document text.

        Returns:
            List of field names
        """
        pass

    @abstractmethod
    def smart_search(self, query: str, documents: List[Dict[str, Any]]) -> List[Dict[str, str]]:
        """
        Rank documents against a natural-language query.

        Args:
            query: User query
            documents: Simplified documents (id, filename, summary, ocrText, originalLanguage)

        Returns:
            List of {"id", "reason"} for strong matches (may be empty)
        """
        pass

    @abstractmethod
    def detect_language(self, text: str) -> str:
        """
        Identify the primary language of a text.

        Returns:
            Language name in Greek, "Άγνωστη" if unknown
        """
        pass


def build_extraction_prompt(metadata_titles: List[str]) -> str:
    metadata_step = ""
    if metadata_titles:
        metadata_step = (
            "4. Metadata extraction: from the extracted text, identify values for the following "
            f"metadata fields: {', '.join(metadata_titles)}. If a value for a field is not found, "
            "return an empty string for it.\n"
        )
    return (
        "Analyze the attached document and perform the following tasks based on its content:\n"
        "1. Optical character recognition: extract all text accurately. Preserve the original language.\n"
        "2. Language identification: identify the primary language of the extracted text. Return the "
        "name of the language in Greek (e.g. \"Ελληνικά\", \"Γερμανικά\", \"Αγγλικά\"). If unknown, use \"Άγνωστη\".\n"
        "3. Summarization: write a concise summary of the text in Greek, no longer than 3-4 sentences.\n"
        f"{metadata_step}\n"
        "Respond with a single JSON object with the keys \"ocrText\", \"summary\", \"originalLanguage\" "
        "and \"metadata\" (an object whose keys are exactly the requested metadata field names). "
        "Return ONLY the JSON object."
    )


def build_translation_prompt(text: str, target_language: str) -> str:
    return f'Translate the following text to {target_language}. Return only the translated text. Text: """{text}"""'


def build_title_suggestion_prompt(sample_text: str) -> str:
    return (
        "Based on the following sample text, identify and suggest relevant metadata titles or fields.\n"
        "For example, from an invoice, you might suggest \"Invoice Number\", \"Date\", \"Total Amount\", \"Vendor Name\".\n"
        "The output should be a JSON array of strings, where each string is a suggested metadata title in Greek.\n\n"
        f"Sample Text:\n---\n{sample_text}\n---\n\n"
        "Return ONLY the JSON array."
    )


def build_search_prompt(query: str, documents: List[Dict[str, Any]]) -> str:
    return (
        "You are an intelligent document search assistant.\n"
        f"A user has provided the following query: \"{query}\"\n\n"
        "Search through the following list of documents and identify the ones that are most relevant to the query.\n"
        "Consider the filename, summary, the extracted text (ocrText), and the originalLanguage.\n\n"
        f"Documents:\n---\n{json.dumps(documents, ensure_ascii=False)}\n---\n\n"
        "Return a JSON array of objects. Each object must contain the 'id' of the matching document and a brief "
        "'reason' (in Greek) explaining why it matches the query.\n"
        "Only return documents that are a strong match. If no documents match, return an empty array. "
        "Return ONLY the JSON array."
    )


def build_language_prompt(text: str) -> str:
    return (
        "Analyze the following text and determine its primary language. Return your answer in Greek "
        "as a JSON object {\"language\": \"...\"} (e.g. \"Ελληνικά\", \"Γερμανικά\"). If unknown, use \"Άγνωστη\".\n\n"
        f'Text to analyze: """{text[:LANGUAGE_SAMPLE_LIMIT]}"""'
    )


def parse_json_response(text: Optional[str]) -> Any:
    """
    Parse a model response that should be pure JSON, tolerating Markdown code fences.

    Raises:
        ServiceError: If the response is not valid JSON
    """
    if not text:
        raise ServiceError("AI service returned an empty response")
    cleaned = text.strip()
    # Models often wrap JSON in ```json ... ``` fences
    fenced = re.match(r"^```(?:json)?\s*(.*?)\s*```$", cleaned, re.DOTALL)
    if fenced:
        cleaned = fenced.group(1)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ServiceError(f"AI service returned malformed JSON: {e}") from e


def is_auth_failure(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in AUTH_ERROR_MARKERS)


class PromptedProvider(AIProvider):
    """
    Implements the workspace operations on top of a single prompt/response call.

    Subclasses implement ``complete`` and translate SDK failures into
    AuthError / ServiceError.
    """

    @abstractmethod
    def complete(self, prompt: str, max_tokens: int, attachment: Optional[Dict[str, Any]] = None) -> str:
        """
        Send one prompt (optionally with a base64 file attachment) and return the text reply.

        Args:
            prompt: Instruction text
            max_tokens: Response token limit
            attachment: {"data": base64 str, "mime_type": str} or None
        """
        pass

    def process_document(self, file_bytes: bytes, mime_type: str, metadata_titles: List[str]) -> Dict[str, Any]:
        attachment = {"data": base64.b64encode(file_bytes).decode("ascii"), "mime_type": mime_type}
        result = parse_json_response(self.complete(build_extraction_prompt(metadata_titles), 4096, attachment))
        if not isinstance(result, dict):
            raise ServiceError("AI service returned an unexpected extraction result")
        return result

    def translate_text(self, text: str, target_language: str) -> str:
        return self.complete(build_translation_prompt(text, target_language), 4096).strip()

    def suggest_metadata_titles(self, sample_text: str) -> List[str]:
        result = parse_json_response(self.complete(build_title_suggestion_prompt(sample_text), 1000))
        if not isinstance(result, list):
            raise ServiceError("AI service returned an unexpected title suggestion result")
        return [str(item) for item in result]

    def smart_search(self, query: str, documents: List[Dict[str, Any]]) -> List[Dict[str, str]]:
        result = parse_json_response(self.complete(build_search_prompt(query, documents), 2000))
        if not isinstance(result, list):
            raise ServiceError("AI service returned an unexpected search result")
        # Non-object entries are dropped
        return [item for item in result if isinstance(item, dict)]

    def detect_language(self, text: str) -> str:
        result = parse_json_response(self.complete(build_language_prompt(text), 100))
        # Some models answer with a bare string
        if isinstance(result, dict):
            return str(result.get("language") or "")
        return str(result)
