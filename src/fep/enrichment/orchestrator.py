"""Mode selection between AI and rules enrichment."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from fep.config.settings import EnrichmentConfig
from fep.enrichment.providers.ai import AiEnrichmentProvider
from fep.enrichment.providers.rules import RulesEnrichmentProvider
from fep.models import CanonicalEvent, EnrichmentResult
from fep.utils.logging import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class Ok:
    result: EnrichmentResult


@dataclass(frozen=True)
class Err:
    reason: str
    error: Exception


AiOutcome = Union[Ok, Err]


class EnrichmentOrchestrator:
    """Run one enrichment according to an explicit EnrichmentConfig.

    - ``ai``: AI provider only; its exceptions reach the caller unchanged.
    - ``rules``, or ``hybrid`` with AI disabled: rules provider only.
    - ``hybrid`` with AI enabled: AI first, rules with reason ``fallback``
      when the AI attempt fails for any reason.
    """

    def __init__(
        self,
        config: EnrichmentConfig,
        ai_provider: AiEnrichmentProvider | None,
        rules_provider: RulesEnrichmentProvider,
    ) -> None:
        self.config = config
        self.ai_provider = ai_provider
        self.rules_provider = rules_provider

    def _require_ai(self) -> AiEnrichmentProvider:
        if self.ai_provider is None:
            raise RuntimeError(f"enrichment mode {self.config.mode!r} needs an AI provider")
        return self.ai_provider

    def _try_ai(self, event: CanonicalEvent) -> AiOutcome:
        try:
            return Ok(self._require_ai().enrich(event))
        except Exception as exc:
            return Err(reason=str(exc), error=exc)

    def enrich(self, event: CanonicalEvent) -> EnrichmentResult:
        mode = self.config.mode

        if mode == "ai":
            return self._require_ai().enrich(event)

        if mode == "hybrid" and self.config.ai_enabled:
            outcome = self._try_ai(event)
            if isinstance(outcome, Ok):
                return outcome.result
            logger.warning(
                "enrichment.fallback event_id=%s reason=%s", event.id, outcome.reason
            )
            return self.rules_provider.enrich(event, reason="fallback")

        return self.rules_provider.enrich(event, reason="rules")
