"""Selection of events that still need enrichment."""

from __future__ import annotations

from fep.db.repository import EventRepository
from fep.enrichment.queue import StaggeredDispatcher
from fep.utils.logging import get_logger


logger = get_logger(__name__)

DEFAULT_LIMIT = 15
FALLBACK_LIMIT = 50


def dispatch_pending(
    repo: EventRepository,
    dispatcher: StaggeredDispatcher,
    limit: int = DEFAULT_LIMIT,
    retry_failed: bool = False,
    max_attempts: int = 5,
) -> list[int]:
    """Enqueue enrichment for active root events and return their ids.

    Without retry_failed, events missing a short summary are picked. With it,
    events that were attempted but never enriched and are below the attempt
    ceiling are picked. A non-positive limit falls back to FALLBACK_LIMIT.
    """
    if limit <= 0:
        limit = FALLBACK_LIMIT
    event_ids = repo.find_enrichment_candidates(
        limit=limit, retry_failed=retry_failed, max_attempts=max_attempts
    )
    for event_id in event_ids:
        dispatcher.dispatch(event_id)
    logger.info(
        "enrich_dispatch.complete count=%s retry_failed=%s limit=%s",
        len(event_ids),
        retry_failed,
        limit,
    )
    return event_ids
