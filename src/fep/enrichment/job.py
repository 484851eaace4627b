"""Per-event enrichment unit of work."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from fep.db.repository import EventRepository
from fep.enrichment.orchestrator import EnrichmentOrchestrator
from fep.utils.logging import get_logger


logger = get_logger(__name__)


class EnrichEventJob:
    """Load an event, enrich it and write the outcome back.

    Guards live here rather than in the orchestrator: missing, duplicate,
    already-enriched and exhausted events are skipped.
    """

    def __init__(
        self,
        repo: EventRepository,
        orchestrator: EnrichmentOrchestrator,
        max_attempts: int = 5,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.repo = repo
        self.orchestrator = orchestrator
        self.max_attempts = max_attempts
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def handle(self, event_id: int) -> bool:
        """Return True when the event was enriched."""
        event = self.repo.get(event_id)
        if event is None:
            logger.warning("enrich_job.event_not_found event_id=%s", event_id)
            return False
        if not event.is_root:
            logger.info("enrich_job.duplicate_skipped event_id=%s", event_id)
            return False
        if event.is_enriched:
            logger.info("enrich_job.already_enriched event_id=%s", event_id)
            return False
        if event.enrichment_attempts >= self.max_attempts:
            logger.info(
                "enrich_job.attempts_exhausted event_id=%s attempts=%s",
                event_id,
                event.enrichment_attempts,
            )
            return False

        attempts = self.repo.increment_attempts(event_id)

        try:
            result = self.orchestrator.enrich(event)
        except Exception as exc:
            self.repo.update(event_id, {"needs_review": True})
            logger.error(
                "enrich_job.failed event_id=%s attempts=%s error=%s", event_id, attempts, exc
            )
            return False

        changes = dict(result.fields)
        if not event.summary and changes.get("short_summary"):
            changes["summary"] = changes["short_summary"]
        changes["enrichment_log_id"] = result.log_id
        changes["enriched_at"] = self.clock()
        changes["needs_review"] = result.mode != "ai"
        self.repo.update(event_id, changes)

        logger.info(
            "enrich_job.enriched event_id=%s mode=%s log_id=%s", event_id, result.mode, result.log_id
        )
        return True
