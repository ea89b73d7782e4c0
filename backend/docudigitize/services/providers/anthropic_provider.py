"""
Anthropic AI Provider.

Provides document processing using Anthropic's Claude API directly.
Images and PDFs are sent as base64 content blocks.
"""
from typing import Optional, Dict, Any
import anthropic
from ...api.exceptions import AuthError, ServiceError
from ...core.config import ANTHROPIC_API_KEY, ANTHROPIC_MODEL
from ...core.logging_config import get_logger
from .base import PromptedProvider, is_auth_failure

logger = get_logger(__name__)


class AnthropicProvider(PromptedProvider):
    """AI Provider using the Anthropic Claude API."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        """Initialize Anthropic provider with an explicit or configured API key."""
        self.api_key = api_key or ANTHROPIC_API_KEY
        self.model = model or ANTHROPIC_MODEL
        # Without a key every call raises AuthError
        if self.api_key:
            self.client = anthropic.Anthropic(api_key=self.api_key)
        else:
            self.client = None

    @staticmethod
    def _attachment_block(attachment: Dict[str, Any]) -> Dict[str, Any]:
        block_type = "document" if attachment["mime_type"] == "application/pdf" else "image"
        return {
            "type": block_type,
            "source": {
                "type": "base64",
                "media_type": attachment["mime_type"],
                "data": attachment["data"],
            },
        }

    def complete(self, prompt: str, max_tokens: int, attachment: Optional[Dict[str, Any]] = None) -> str:
        if not self.client:
            raise AuthError("Anthropic API key not configured")

        # Attachment goes before the prompt text
        content = [{"type": "text", "text": prompt}]
        if attachment is not None:
            content.insert(0, self._attachment_block(attachment))

        try:
            message = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": content}]
            )
            return message.content[0].text
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as e:
            logger.error(f"Anthropic API Error (Auth): {e}")
            raise AuthError(str(e)) from e
        except anthropic.APIError as e:
            logger.error(f"Anthropic API Error: {e}")
            if is_auth_failure(str(e)):
                raise AuthError(str(e)) from e
            raise ServiceError(f"Anthropic request failed: {e}") from e
