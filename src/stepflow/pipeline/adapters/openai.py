"""OpenAI chat-completions adapter over httpx."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from stepflow.core.exceptions import ProviderError
from stepflow.pipeline.adapters.base import SYSTEM_MESSAGE, build_user_message

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_TIMEOUT_SECONDS = 30.0


class OpenAIChatAdapter:
    """Sends one chat-completions request per AI step.

    A caller-provided ``httpx.AsyncClient`` is used as-is and left open;
    otherwise a short-lived client is created per request.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize with credentials and transport options."""
        if not api_key:
            raise ValueError("api_key must be a non-empty string")
        self._api_key = api_key
        self._url = base_url.rstrip("/") + "/chat/completions"
        self._timeout = timeout
        self._client = client

    def __repr__(self) -> str:
        """Representation without the API key."""
        return f"OpenAIChatAdapter(url={self._url!r}, api_key=[REDACTED])"

    async def invoke(
        self, text: str, instruction: str, model: str, temperature: float
    ) -> str:
        """Run ``instruction`` over ``text`` and return the trimmed reply."""
        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": build_user_message(text, instruction)},
            ],
            "temperature": temperature,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        try:
            if self._client is not None:
                response = await self._client.post(
                    self._url, json=payload, headers=headers, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise ProviderError(f"Request timed out after {self._timeout}s.") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Network error: {e}") from e

        if not response.is_success:
            logger.debug("OpenAI request failed with status %s", response.status_code)
            raise ProviderError(
                f"Request failed ({response.status_code}). {response.text or 'Unknown error'}"
            )
        return _extract_content(response)


def _extract_content(response: httpx.Response) -> str:
    try:
        body: Any = response.json()
        content = body["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise ProviderError(f"Could not decode the response: {e}") from e
    if not isinstance(content, str) or not content.strip():
        raise ProviderError("The AI response was empty.")
    return content.strip()
