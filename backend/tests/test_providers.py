"""
Tests for the AI providers, with the SDK clients replaced by fakes.
"""
import base64
import json
from types import SimpleNamespace

import anthropic
import httpx
import openai
import pytest

from docudigitize.api.exceptions import AuthError, ServiceError
from docudigitize.services.providers import (
    AIProviderFactory,
    AnthropicProvider,
    MockProvider,
    OpenRouterProvider,
)
from docudigitize.services.providers.base import is_auth_failure, parse_json_response


def _request(url):
    return httpx.Request("POST", url)


class FakeAnthropicMessages:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(content=[SimpleNamespace(text=self.reply)])


class FakeChatCompletions:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def anthropic_provider(reply=None, error=None):
    provider = AnthropicProvider(api_key="sk-ant-test")
    messages = FakeAnthropicMessages(reply, error)
    provider.client = SimpleNamespace(messages=messages)
    return provider, messages


def openrouter_provider(reply=None, error=None):
    provider = OpenRouterProvider(api_key="sk-or-test")
    completions = FakeChatCompletions(reply, error)
    provider.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return provider, completions


class TestResponseParsing:
    def test_plain_json(self):
        assert parse_json_response('{"language": "Ελληνικά"}') == {"language": "Ελληνικά"}

    def test_fenced_json(self):
        assert parse_json_response('```json\n["Ημερομηνία", "Αποστολέας"]\n```') == ["Ημερομηνία", "Αποστολέας"]

    @pytest.mark.parametrize("text", [None, "", "Sure! Here are the fields:", "```json\n{broken\n```"])
    def test_malformed_responses(self, text):
        with pytest.raises(ServiceError):
            parse_json_response(text)

    def test_auth_failure_markers(self):
        assert is_auth_failure("400 API key not valid. Please pass a valid API key.")
        assert not is_auth_failure("503 model overloaded")


class TestAnthropicProvider:
    def test_image_is_sent_as_base64_image_block(self):
        extraction = {"ocrText": "κείμενο", "summary": "σύνοψη", "originalLanguage": "Ελληνικά", "metadata": {"Date": ""}}
        provider, messages = anthropic_provider(reply=json.dumps(extraction, ensure_ascii=False))

        result = provider.process_document(b"png-bytes", "image/png", ["Date"])

        assert result == extraction
        content = messages.requests[0]["messages"][0]["content"]
        assert content[0]["type"] == "image"
        assert content[0]["source"]["data"] == base64.b64encode(b"png-bytes").decode("ascii")
        assert "Date" in content[1]["text"]

    def test_pdf_is_sent_as_document_block(self):
        provider, messages = anthropic_provider(reply='{"ocrText": ""}')
        provider.process_document(b"%PDF", "application/pdf", [])
        content = messages.requests[0]["messages"][0]["content"]
        assert content[0]["type"] == "document"
        assert content[0]["source"]["media_type"] == "application/pdf"

    def test_missing_key_is_an_auth_error(self):
        provider, _ = anthropic_provider()
        provider.client = None
        with pytest.raises(AuthError):
            provider.translate_text("Γεια", "English")

    def test_rejected_key_is_an_auth_error(self):
        response = httpx.Response(401, request=_request("https://api.anthropic.com/v1/messages"))
        error = anthropic.AuthenticationError("invalid x-api-key", response=response, body=None)
        provider, _ = anthropic_provider(error=error)

        with pytest.raises(AuthError):
            provider.detect_language("Hello")

    def test_connection_failure_is_a_service_error(self):
        error = anthropic.APIConnectionError(request=_request("https://api.anthropic.com/v1/messages"))
        provider, _ = anthropic_provider(error=error)

        with pytest.raises(ServiceError):
            provider.suggest_metadata_titles("Ημερομηνία: 1932")

    def test_unexpected_shape_is_a_service_error(self):
        provider, _ = anthropic_provider(reply='{"titles": ["Date"]}')
        with pytest.raises(ServiceError):
            provider.suggest_metadata_titles("Date: 1932")


class TestOpenRouterProvider:
    def test_image_is_sent_as_data_url(self):
        provider, completions = openrouter_provider(reply='[{"id": "f1", "reason": "ταιριάζει"}]')

        assert provider.smart_search("letters", [{"id": "f1"}]) == [{"id": "f1", "reason": "ταιριάζει"}]

        completions.reply = '{"ocrText": "x"}'
        provider.process_document(b"jpg", "image/jpeg", [])
        part = completions.requests[-1]["messages"][0]["content"][0]
        assert part["type"] == "image_url"
        assert part["image_url"]["url"].startswith("data:image/jpeg;base64,")

    def test_translation_is_stripped(self):
        provider, _ = openrouter_provider(reply="  Dear friend \n")
        assert provider.translate_text("Αγαπητέ φίλε", "English") == "Dear friend"

    def test_rejected_key_is_an_auth_error(self):
        response = httpx.Response(401, request=_request("https://openrouter.ai/api/v1/chat/completions"))
        error = openai.AuthenticationError("No auth credentials found", response=response, body=None)
        provider, _ = openrouter_provider(error=error)

        with pytest.raises(AuthError):
            provider.translate_text("Γεια", "English")

    def test_server_error_is_a_service_error(self):
        response = httpx.Response(502, request=_request("https://openrouter.ai/api/v1/chat/completions"))
        error = openai.InternalServerError("upstream failure", response=response, body=None)
        provider, _ = openrouter_provider(error=error)

        with pytest.raises(ServiceError):
            provider.detect_language("Hello")


class TestMockProvider:
    def test_extraction_is_deterministic(self):
        provider = MockProvider()
        first = provider.process_document(b"scan", "image/png", ["Date", "Author"])
        assert first == provider.process_document(b"scan", "image/png", ["Date", "Author"])
        assert first["metadata"] == {"Date": "", "Author": ""}

    def test_language_detection(self):
        provider = MockProvider()
        assert provider.detect_language("Αγαπητέ φίλε") == "ελληνικά"
        assert provider.detect_language("Dear friend") == "αγγλικά"
        assert provider.detect_language("1932 - 1940") == "Άγνωστη"

    def test_title_suggestions_use_labels(self):
        provider = MockProvider()
        assert provider.suggest_metadata_titles("Ημερομηνία: 1932\nΤόπος: Αθήνα") == ["Ημερομηνία", "Τόπος"]


class TestAIProviderFactory:
    def test_mock_provider(self):
        assert isinstance(AIProviderFactory.get_provider(provider_type="mock"), MockProvider)

    def test_supplied_key_selects_real_provider(self):
        assert isinstance(AIProviderFactory.get_provider(api_key="sk-ant-test", provider_type="anthropic"), AnthropicProvider)
        assert isinstance(AIProviderFactory.get_provider(api_key="sk-or-test", provider_type="openrouter"), OpenRouterProvider)
