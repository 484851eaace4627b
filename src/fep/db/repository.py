"""Storage contracts used by the pipeline.

The ingestion and enrichment code only talks to these protocols; PostgreSQL
and in-memory implementations live next to this module.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol

from fep.models import CanonicalEvent, EnrichmentLogEntry, LogMode, LogStatus


class EventRepository(Protocol):
    """Catalog access for events."""

    def get(self, event_id: int) -> Optional[CanonicalEvent]:
        """Return one event by id."""

    def find_by_source_id(self, source: str, source_event_id: str) -> Optional[CanonicalEvent]:
        """Return the event a source adapter published under its own id."""

    def find_root_by_fingerprint(self, fingerprint: str) -> Optional[CanonicalEvent]:
        """Return the oldest root event with this fingerprint."""

    def find_by_url_id(self, url_id: str, exclude_source: str) -> Optional[CanonicalEvent]:
        """Return the oldest event from another source whose URL embeds url_id."""

    def find_root_candidates_at(self, start_at: datetime) -> list[CanonicalEvent]:
        """Return non-rejected root events starting at exactly start_at."""

    def insert(self, fields: dict[str, Any]) -> CanonicalEvent:
        """Insert a new event; raise ConflictError on a uniqueness violation."""

    def update(self, event_id: int, changes: dict[str, Any]) -> None:
        """Write the given columns."""

    def increment_attempts(self, event_id: int) -> int:
        """Bump enrichment_attempts and return the new value."""

    def find_active(
        self,
        start: datetime,
        end: datetime,
        age_min: Optional[int],
        age_max: Optional[int],
        limit: int,
    ) -> list[CanonicalEvent]:
        """Return visible root events starting within [start, end]."""

    def find_created_since(
        self,
        since: datetime,
        age_min: Optional[int],
        age_max: Optional[int],
        limit: int,
    ) -> list[CanonicalEvent]:
        """Return visible root events created at or after since."""

    def find_enrichment_candidates(
        self,
        limit: int,
        retry_failed: bool,
        max_attempts: int,
    ) -> list[int]:
        """Return ids of root events that should get an enrichment job."""

    def deactivate_before(self, cutoff: datetime) -> int:
        """Mark events that ended before cutoff inactive; return the count."""


class EnrichmentLogStore(Protocol):
    """Append-only enrichment attempt history."""

    def create_pending(self, event_id: int, mode: LogMode, prompt: str) -> int:
        """Open an attempt and return its id."""

    def complete(
        self,
        log_id: int,
        status: LogStatus,
        response: Optional[str] = None,
        duration_ms: Optional[int] = None,
        error: Optional[str] = None,
        tokens_prompt: Optional[int] = None,
        tokens_completion: Optional[int] = None,
    ) -> bool:
        """Close a pending attempt; return False if it was already closed."""

    def record(
        self,
        event_id: int,
        mode: LogMode,
        prompt: str,
        response: Optional[str],
        status: LogStatus,
    ) -> int:
        """Write a finished attempt in one step and return its id."""

    def get(self, log_id: int) -> Optional[EnrichmentLogEntry]:
        """Return one entry."""
