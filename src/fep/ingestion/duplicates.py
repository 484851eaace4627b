"""Cross-source duplicate detection."""

from __future__ import annotations

from typing import Optional

from fep.db.repository import EventRepository
from fep.ingestion.fingerprint import extract_url_id
from fep.models import CanonicalEvent, EventRecord
from fep.utils.logging import get_logger
from fep.utils.text import normalize_for_match, similarity_percent


logger = get_logger(__name__)

MAX_DUPLICATE_CHAIN_DEPTH = 10

TITLE_THRESHOLD = 80.0
LOCATION_THRESHOLD = 70.0
TITLE_ONLY_THRESHOLD = 90.0

# Sources that publish the same upstream event ids.
RELATED_SOURCES: dict[str, str] = {
    "visitostrava": "ostravainfo",
    "ostravainfo": "visitostrava",
}


class DuplicateResolver:
    """Find the canonical event a new record describes and walk duplicate chains."""

    def __init__(self, repo: EventRepository) -> None:
        self.repo = repo

    def find_duplicate_candidate(self, record: EventRecord) -> Optional[CanonicalEvent]:
        """Return the first match of the tiered cascade, or None."""
        match = self.repo.find_root_by_fingerprint(record.fingerprint)
        if match is not None:
            logger.debug("duplicates.match tier=fingerprint event_id=%s", match.id)
            return match

        related = RELATED_SOURCES.get(record.source)
        if related is not None:
            match = self.repo.find_by_source_id(related, record.source_event_id)
            if match is not None:
                logger.debug("duplicates.match tier=related_source event_id=%s", match.id)
                return match

        url_id = extract_url_id(record.source_url)
        if url_id is not None:
            match = self.repo.find_by_url_id(url_id, exclude_source=record.source)
            if match is not None:
                logger.debug("duplicates.match tier=url_id event_id=%s", match.id)
                return match

        return self._find_fuzzy(record)

    def _find_fuzzy(self, record: EventRecord) -> Optional[CanonicalEvent]:
        title = normalize_for_match(record.title)
        if not title:
            return None
        location = normalize_for_match(record.location_name or record.venue)

        best: Optional[CanonicalEvent] = None
        best_score = 0.0
        for candidate in self.repo.find_root_candidates_at(record.start_at):
            if candidate.status == "rejected":
                continue
            candidate_title = normalize_for_match(candidate.title)
            if not candidate_title:
                continue

            title_score = similarity_percent(title, candidate_title)
            candidate_location = normalize_for_match(candidate.match_location)
            if location and candidate_location:
                location_score = similarity_percent(location, candidate_location)
                is_duplicate = (
                    title_score >= TITLE_THRESHOLD and location_score >= LOCATION_THRESHOLD
                )
            else:
                is_duplicate = title_score >= TITLE_ONLY_THRESHOLD

            if is_duplicate and title_score > best_score:
                best = candidate
                best_score = title_score

        if best is not None:
            logger.debug(
                "duplicates.match tier=fuzzy event_id=%s title_score=%.1f", best.id, best_score
            )
        return best

    def resolve_root_id(self, event: CanonicalEvent) -> int:
        """Follow duplicate_of_event_id up to the root.

        A missing parent ends the walk at the current node. A chain longer
        than MAX_DUPLICATE_CHAIN_DEPTH (or a cycle) is logged and also ends
        at the current node.
        """
        root = event
        depth = 0
        while root.duplicate_of_event_id is not None:
            depth += 1
            if depth > MAX_DUPLICATE_CHAIN_DEPTH:
                logger.warning(
                    "duplicates.chain_too_deep event_id=%s current_id=%s depth=%s",
                    event.id,
                    root.id,
                    depth,
                )
                return root.id
            parent = self.repo.get(root.duplicate_of_event_id)
            if parent is None:
                logger.warning(
                    "duplicates.broken_chain event_id=%s current_id=%s missing_id=%s",
                    event.id,
                    root.id,
                    root.duplicate_of_event_id,
                )
                break
            root = parent
        return root.id
