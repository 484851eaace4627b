"""Gemini REST client for JSON enrichment output."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from fep.config import Settings
from fep.enrichment.llm.base import LlmCompletion, dig, int_or_none
from fep.errors import LlmError


class GeminiClient:
    """Minimal REST client for Gemini generateContent."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.settings = settings or Settings()
        self._http = http_client

    def _post(self, url: str, params: dict[str, str], body: dict[str, Any]) -> httpx.Response:
        if self._http is not None:
            return self._http.post(url, params=params, json=body)
        with httpx.Client(timeout=self.settings.gemini_timeout_seconds) as client:
            return client.post(url, params=params, json=body)

    def complete(self, prompt: str) -> LlmCompletion:
        if not self.settings.google_api_key:
            raise LlmError("GOOGLE_API_KEY must be set for Gemini enrichment")
        url = (
            f"{self.settings.gemini_api_base_url}/models/"
            f"{self.settings.gemini_model_id}:generateContent"
        )
        params = {"key": self.settings.google_api_key}
        body: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.settings.gemini_temperature,
                "responseMimeType": "application/json",
            },
        }

        try:
            response = self._post(url, params, body)
        except httpx.HTTPError as exc:
            raise LlmError(f"Gemini request failed: {exc}") from exc

        if response.status_code != 200:
            raise LlmError(f"Gemini API request failed: {response.status_code} {response.text[:500]}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise LlmError("Gemini returned a non-JSON body") from exc

        text = dig(payload, "candidates", 0, "content", "parts", 0, "text")
        if not isinstance(text, str) or not text:
            raise LlmError(f"Gemini returned no content: {response.text[:500]}")

        return LlmCompletion(
            text=text,
            prompt_tokens=int_or_none(dig(payload, "usageMetadata", "promptTokenCount")),
            completion_tokens=int_or_none(dig(payload, "usageMetadata", "candidatesTokenCount")),
        )
