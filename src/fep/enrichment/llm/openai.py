"""OpenAI chat completions client for JSON enrichment output."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from fep.config import Settings
from fep.enrichment.llm.base import LlmCompletion, dig, int_or_none
from fep.errors import LlmError


SYSTEM_MESSAGE = "Return ONLY valid JSON. No markdown. No extra keys."


class OpenAiClient:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.settings = settings or Settings()
        self._http = http_client

    def _post(self, body: dict[str, Any]) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self.settings.openai_api_key}"}
        if self._http is not None:
            return self._http.post(self.settings.openai_api_url, headers=headers, json=body)
        with httpx.Client(timeout=self.settings.openai_timeout_seconds) as client:
            return client.post(self.settings.openai_api_url, headers=headers, json=body)

    def complete(self, prompt: str) -> LlmCompletion:
        if not self.settings.openai_api_key:
            raise LlmError("OPENAI_API_KEY must be set for OpenAI enrichment")
        body: dict[str, Any] = {
            "model": self.settings.openai_model_id,
            "temperature": self.settings.openai_temperature,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": prompt},
            ],
        }

        try:
            response = self._post(body)
        except httpx.HTTPError as exc:
            raise LlmError(f"OpenAI request failed: {exc}") from exc

        if response.status_code != 200:
            raise LlmError(f"OpenAI API request failed: {response.status_code} {response.text[:500]}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise LlmError("OpenAI returned a non-JSON body") from exc

        text = dig(payload, "choices", 0, "message", "content")
        if not isinstance(text, str) or not text:
            raise LlmError(f"OpenAI returned no content: {response.text[:500]}")

        return LlmCompletion(
            text=text,
            prompt_tokens=int_or_none(dig(payload, "usage", "prompt_tokens")),
            completion_tokens=int_or_none(dig(payload, "usage", "completion_tokens")),
        )
