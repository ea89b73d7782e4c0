"""
OpenRouter AI Provider.

Provides document processing through the OpenRouter API (OpenAI-compatible),
which gives access to vision-capable models from several vendors.
"""
from typing import Optional, Dict, Any
import openai
from openai import OpenAI
from ...api.exceptions import AuthError, ServiceError
from ...core.config import OPENROUTER_API_KEY, OPENROUTER_BASE_URL, OPENROUTER_MODEL
from ...core.logging_config import get_logger
from .base import PromptedProvider, is_auth_failure

logger = get_logger(__name__)


class OpenRouterProvider(PromptedProvider):
    """AI Provider using the OpenRouter API."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        """Initialize OpenRouter provider with an explicit or configured API key."""
        self.api_key = api_key or OPENROUTER_API_KEY
        self.model = model or OPENROUTER_MODEL
        # Without a key every call raises AuthError
        if self.api_key:
            self.client = OpenAI(
                base_url=OPENROUTER_BASE_URL,
                api_key=self.api_key
            )
        else:
            self.client = None

    @staticmethod
    def _attachment_part(attachment: Dict[str, Any]) -> Dict[str, Any]:
        data_url = f"data:{attachment['mime_type']};base64,{attachment['data']}"
        if attachment["mime_type"] == "application/pdf":
            return {"type": "file", "file": {"filename": "document.pdf", "file_data": data_url}}
        return {"type": "image_url", "image_url": {"url": data_url}}

    def complete(self, prompt: str, max_tokens: int, attachment: Optional[Dict[str, Any]] = None) -> str:
        if not self.client:
            raise AuthError("OpenRouter API key not configured")

        # Attachment goes before the prompt text
        content = [{"type": "text", "text": prompt}]
        if attachment is not None:
            content.insert(0, self._attachment_part(attachment))

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": content}],
                max_tokens=max_tokens
            )
            return response.choices[0].message.content or ""
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            logger.error(f"OpenRouter API Error (Auth): {e}")
            raise AuthError(str(e)) from e
        except openai.APIError as e:
            logger.error(f"OpenRouter API Error: {e}")
            if is_auth_failure(str(e)):
                raise AuthError(str(e)) from e
            raise ServiceError(f"OpenRouter request failed: {e}") from e
