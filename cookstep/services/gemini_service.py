"""
Gemini LLM service.

Only one capability is exposed: a JSON-constrained completion. Parsing and
validating what comes back is the caller's job.
"""

from __future__ import annotations

import logging
from typing import Optional

from google import genai
from google.genai import types

from cookstep.config import settings
from cookstep.utils.exceptions import GeminiError
from cookstep.utils.gemini_helpers import get_response_text

logger = logging.getLogger(__name__)


class GeminiService:
    """Service for interacting with Gemini API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> None:
        self.api_key = settings.gemini_api_key if api_key is None else api_key
        self.model = model or settings.gemini_model
        self.temperature = settings.gemini_temperature if temperature is None else temperature
        self._client: Optional[genai.Client] = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> genai.Client:
        """Get or create Gemini client (lazy initialization)."""
        if not self.configured:
            raise GeminiError("GEMINI_API_KEY is not configured")
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate_structured_completion(self, prompt: str) -> str:
        """
        Send a prompt and return the raw JSON text of the answer.

        Raises:
            GeminiError: no API key, the SDK call failed, or the answer was empty
        """
        client = self.client

        # Async client: cancelling this await cancels the HTTP request
        try:
            resp = await client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    temperature=self.temperature,
                ),
            )
        except Exception as e:
            raise GeminiError(f"Gemini call failed: {e}") from e

        text = get_response_text(resp)
        if not text:
            raise GeminiError("Gemini returned empty response")
        logger.debug("Gemini raw response:\n%s", text)
        return text.strip()
