"""
Perplexity API client.
Thin wrapper over the chat completions endpoint used by query enhancement,
recommendations and the web search provider.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from towgo.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

API_URL = "https://api.perplexity.ai/chat/completions"


class PerplexityClient:
    """HTTP client for Perplexity chat completions."""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or default_settings
        self.api_key = settings.perplexity_api_key
        self.model = settings.perplexity_model
        self.timeout = settings.perplexity_timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def chat(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        **options: Any,
    ) -> Dict[str, Any]:
        """
        Send a chat completion request.

        Raises:
            httpx.HTTPStatusError: Perplexity answered with an error status
            httpx.RequestError: the request never completed
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload: Dict[str, Any] = {
            "model": model or self.model,
            "messages": messages,
        }
        payload.update(options)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(API_URL, json=payload, headers=headers)
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(
                    f"Perplexity API error {e.response.status_code}: {e.response.text[:500]}"
                )
                raise
            return response.json()


def first_message_content(data: Any) -> str:
    """Trimmed text of the first choice, empty if the shape is unexpected."""
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content.strip() if isinstance(content, str) else ""


def citations(data: Any) -> List[str]:
    """Citation URLs attached to a response."""
    if not isinstance(data, dict) or not isinstance(data.get("citations"), list):
        return []
    return [url for url in data["citations"] if isinstance(url, str) and url]
