import os

# Configure the app for tests before any docudigitize module reads its settings
os.environ["ENVIRONMENT"] = "test"
os.environ["STORE_TYPE"] = "memory"
os.environ["AI_PROVIDER"] = "mock"
os.environ["ENABLE_FILE_LOGGING"] = "false"
os.environ.pop("ANTHROPIC_API_KEY", None)
os.environ.pop("OPENROUTER_API_KEY", None)

import pytest
from typing import Any, Dict, List

from docudigitize.services.ai_service import AIService
from docudigitize.services.database import MemoryStore
from docudigitize.services.providers.base import AIProvider


class StubProvider(AIProvider):
    """
    Scriptable provider.

    ``errors[method]`` is a list consumed one entry per call; an exception
    entry is raised, None lets that call succeed.
    """

    def __init__(self):
        self.calls: List[tuple] = []
        self.errors: Dict[str, List[Any]] = {}
        self.extraction = None
        self.suggestions: List[str] = []
        self.search_results: List[Dict[str, str]] = []
        self.languages: Dict[str, str] = {}

    def _record(self, name: str, *args):
        self.calls.append((name, args))
        pending = self.errors.get(name)
        if pending:
            error = pending.pop(0)
            if error is not None:
                raise error

    def calls_to(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    def process_document(self, file_bytes, mime_type, metadata_titles):
        self._record("process_document", file_bytes, mime_type, metadata_titles)
        if self.extraction is not None:
            return dict(self.extraction)
        return {
            "ocrText": f"text of {len(file_bytes)} bytes",
            "summary": "Σύνοψη εγγράφου.",
            "originalLanguage": "Ελληνικά",
            "metadata": {title: f"value for {title}" for title in metadata_titles},
        }

    def translate_text(self, text, target_language):
        self._record("translate_text", text, target_language)
        return f"{target_language}: {text}"

    def suggest_metadata_titles(self, sample_text):
        self._record("suggest_metadata_titles", sample_text)
        return list(self.suggestions)

    def smart_search(self, query, documents):
        self._record("smart_search", query, documents)
        return list(self.search_results)

    def detect_language(self, text):
        self._record("detect_language", text)
        return self.languages.get(text, "ελληνικά")


@pytest.fixture
def store():
    memory_store = MemoryStore()
    memory_store.initialize()
    return memory_store


@pytest.fixture
def provider():
    return StubProvider()


@pytest.fixture
def ai_service(provider):
    return AIService(provider)
