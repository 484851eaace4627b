"""LLM backends used by the AI enrichment provider."""

from typing import Optional

from fep.config import Settings
from fep.enrichment.llm.base import LlmClient, LlmCompletion
from fep.enrichment.llm.gemini import GeminiClient
from fep.enrichment.llm.openai import OpenAiClient


def build_client(settings: Optional[Settings] = None) -> LlmClient:
    """Return the client selected by ENRICHMENT_AI_PROVIDER."""
    settings = settings or Settings()
    if settings.enrichment_ai_provider == "openai":
        return OpenAiClient(settings)
    return GeminiClient(settings)


__all__ = ["GeminiClient", "LlmClient", "LlmCompletion", "OpenAiClient", "build_client"]
