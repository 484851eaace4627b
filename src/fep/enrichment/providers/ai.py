"""LLM-backed enrichment provider."""

from __future__ import annotations

import time
from typing import Any, Optional

import orjson

from fep.db.repository import EnrichmentLogStore
from fep.enrichment.llm.base import LlmClient, parse_json_object
from fep.enrichment.prompt_loader import load_prompt
from fep.enrichment.schemas import EnrichmentOutput
from fep.errors import EnrichmentError
from fep.models import CanonicalEvent, EnrichmentResult
from fep.utils.hashing import hash_text
from fep.utils.logging import get_logger
from fep.utils.time import DEFAULT_TIMEZONE, localize


logger = get_logger(__name__)

MAX_ERROR_CHARS = 1000


def _iso(value: Any, tz_name: str) -> Optional[str]:
    if value is None:
        return None
    return localize(value, tz_name).isoformat(timespec="seconds")


def _elapsed_ms(started: float) -> int:
    return int(round((time.monotonic() - started) * 1000))


class AiEnrichmentProvider:
    """Ask an LLM for the enrichment fields and normalize its answer.

    Every call writes one log entry: `pending` before the request, then
    `success` or `failed` once the outcome is known.
    """

    def __init__(
        self,
        client: LlmClient,
        logs: EnrichmentLogStore,
        prompt_version: str = "v001",
        tz_name: str = DEFAULT_TIMEZONE,
    ) -> None:
        self.client = client
        self.logs = logs
        self.template = load_prompt(prompt_version)
        self.tz_name = tz_name

    def build_prompt(self, event: CanonicalEvent) -> str:
        payload = {
            "title": event.title,
            "description_raw": event.description_raw
            if event.description_raw is not None
            else event.description,
            "start_at": _iso(event.start_at, self.tz_name),
            "end_at": _iso(event.end_at, self.tz_name),
            "location_name": event.match_location,
            "source_url": event.source_url,
        }
        return self.template + "\n\n" + orjson.dumps(payload).decode("utf-8")

    def enrich(self, event: CanonicalEvent) -> EnrichmentResult:
        prompt = self.build_prompt(event)
        log_id = self.logs.create_pending(event.id, "ai", prompt)
        started = time.monotonic()

        try:
            completion = self.client.complete(prompt)
        except Exception as exc:
            self.logs.complete(
                log_id,
                "failed",
                duration_ms=_elapsed_ms(started),
                error=str(exc)[:MAX_ERROR_CHARS],
            )
            logger.error("enrichment.ai_failed event_id=%s error=%s", event.id, exc)
            raise

        duration_ms = _elapsed_ms(started)
        try:
            parsed = parse_json_object(completion.text)
        except orjson.JSONDecodeError:
            parsed = None

        if not isinstance(parsed, dict):
            self.logs.complete(
                log_id,
                "failed",
                response=completion.text,
                duration_ms=duration_ms,
                error="Invalid JSON response",
                tokens_prompt=completion.prompt_tokens,
                tokens_completion=completion.completion_tokens,
            )
            logger.error("enrichment.ai_invalid_json event_id=%s", event.id)
            raise EnrichmentError("Invalid JSON from LLM.")

        self.logs.complete(
            log_id,
            "success",
            response=completion.text,
            duration_ms=duration_ms,
            tokens_prompt=completion.prompt_tokens,
            tokens_completion=completion.completion_tokens,
        )
        logger.info(
            "enrichment.ai_success event_id=%s log_id=%s prompt_hash=%s duration_ms=%s",
            event.id,
            log_id,
            hash_text(prompt),
            duration_ms,
        )
        output = EnrichmentOutput.model_validate(parsed)
        return EnrichmentResult(log_id=log_id, fields=output.to_fields(), mode="ai")
