"""Google Gemini adapter built on the google-genai SDK."""

from __future__ import annotations

import logging
from typing import Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from stepflow.core.exceptions import ProviderError
from stepflow.pipeline.adapters.base import SYSTEM_MESSAGE, build_user_message

logger = logging.getLogger(__name__)


class GoogleGenAIAdapter:
    """Runs AI steps through ``client.aio.models.generate_content``.

    ``client`` may be injected (tests, shared SDK clients); otherwise one is
    created from ``api_key``.
    """

    def __init__(self, api_key: str, *, client: Any | None = None) -> None:
        """Initialize the adapter."""
        if client is None and not api_key:
            raise ValueError("api_key must be a non-empty string")
        self._client = client if client is not None else genai.Client(api_key=api_key)

    def __repr__(self) -> str:
        """Representation without the API key."""
        return "GoogleGenAIAdapter(api_key=[REDACTED])"

    async def invoke(
        self, text: str, instruction: str, model: str, temperature: float
    ) -> str:
        """Run ``instruction`` over ``text`` and return the trimmed reply."""
        config = types.GenerateContentConfig(
            system_instruction=SYSTEM_MESSAGE,
            temperature=temperature,
            response_mime_type="text/plain",
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=model,
                contents=build_user_message(text, instruction),
                config=config,
            )
        except genai_errors.APIError as e:
            logger.debug("Gemini request failed with status %s", e.code)
            raise ProviderError(f"Request failed ({e.code}). {e.message}") from e

        content = getattr(response, "text", None)
        if not isinstance(content, str) or not content.strip():
            raise ProviderError("The AI response was empty.")
        return content.strip()
