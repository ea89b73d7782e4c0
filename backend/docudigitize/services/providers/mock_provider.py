"""
Mock AI Provider.

Provides mock implementations for testing and fallback scenarios.
Does not make actual API calls, returns deterministic simulated responses.
"""
from typing import List, Dict, Any
import hashlib
import re
from ...core.logging_config import get_logger
from ...domain.value_objects import UNKNOWN_LANGUAGE
from .base import AIProvider

logger = get_logger(__name__)

GREEK_LETTERS = re.compile(r"[\u0370-\u03ff\u1f00-\u1fff]")
LATIN_LETTERS = re.compile(r"[A-Za-z]")


class MockProvider(AIProvider):
    """
    Mock AI Provider for testing and fallback scenarios.

    Provides simulated AI responses without making actual API calls.
    Useful for:
    - Development and testing
    - Fallback when API keys are not configured
    - Offline development
    """

    def process_document(self, file_bytes: bytes, mime_type: str, metadata_titles: List[str]) -> Dict[str, Any]:
        """Generate a mock extraction keyed by the content digest."""
        digest = hashlib.sha256(file_bytes).hexdigest()[:12]
        return {
            "ocrText": f"MOCK OCR text for document {digest} ({len(file_bytes)} bytes, {mime_type}).",
            "summary": f"Δοκιμαστική σύνοψη για το έγγραφο {digest}.",
            "originalLanguage": "Ελληνικά",
            "metadata": {title: "" for title in metadata_titles},
        }

    def translate_text(self, text: str, target_language: str) -> str:
        """Generate a mock translation for testing."""
        return f"[{target_language}] {text}"

    def suggest_metadata_titles(self, sample_text: str) -> List[str]:
        """Suggest the labels of 'Label: value' lines, or generic fields."""
        titles = []
        for line in sample_text.splitlines():
            label, sep, _ = line.partition(":")
            label = label.strip()
            # Only "Label: value" lines count
            if sep and label and label not in titles:
                titles.append(label)
        return titles or ["Ημερομηνία", "Αποστολέας", "Παραλήπτης"]

    def smart_search(self, query: str, documents: List[Dict[str, Any]]) -> List[Dict[str, str]]:
        """Match documents containing the query text (case-insensitive)."""
        needle = query.strip().casefold()
        if not needle:
            return []
        matches = []
        for doc in documents:
            for field in ("filename", "summary", "ocrText"):
                if needle in str(doc.get(field) or "").casefold():
                    matches.append({"id": doc["id"], "reason": f"Το πεδίο '{field}' περιέχει τον όρο αναζήτησης."})
                    break
        return matches

    def detect_language(self, text: str) -> str:
        """Guess Greek or English from the letters used."""
        greek = len(GREEK_LETTERS.findall(text))
        latin = len(LATIN_LETTERS.findall(text))
        if greek == 0 and latin == 0:
            return UNKNOWN_LANGUAGE
        return "ελληνικά" if greek >= latin else "αγγλικά"
