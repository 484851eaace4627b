"""In-memory stores for dry runs and tests."""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from fep.errors import ConflictError
from fep.ingestion.fingerprint import extract_url_id
from fep.models import (
    TERMINAL_LOG_STATUSES,
    CanonicalEvent,
    EnrichmentLogEntry,
    LogMode,
    LogStatus,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _age_overlaps(event: CanonicalEvent, age_min: Optional[int], age_max: Optional[int]) -> bool:
    if age_max is not None and event.age_min is not None and event.age_min > age_max:
        return False
    if age_min is not None and event.age_max is not None and event.age_max < age_min:
        return False
    return True


class MemoryEventRepository:
    """EventRepository backed by a dict keyed by id."""

    def __init__(self, events: Iterable[CanonicalEvent] = ()) -> None:
        self._lock = threading.RLock()
        self._events: dict[int, CanonicalEvent] = {}
        self._next_id = 1
        for event in events:
            self.put(event)

    def put(self, event: CanonicalEvent) -> CanonicalEvent:
        """Store a fully built event as-is, bypassing constraints."""
        with self._lock:
            self._events[event.id] = event
            self._next_id = max(self._next_id, event.id + 1)
        return event

    def all(self) -> list[CanonicalEvent]:
        with self._lock:
            return sorted(self._events.values(), key=lambda e: e.id)

    def get(self, event_id: int) -> Optional[CanonicalEvent]:
        with self._lock:
            return self._events.get(event_id)

    def find_by_source_id(self, source: str, source_event_id: str) -> Optional[CanonicalEvent]:
        return self._first(
            e for e in self.all() if e.source == source and e.source_event_id == source_event_id
        )

    def find_root_by_fingerprint(self, fingerprint: str) -> Optional[CanonicalEvent]:
        return self._first(e for e in self.all() if e.is_root and e.fingerprint == fingerprint)

    def find_by_url_id(self, url_id: str, exclude_source: str) -> Optional[CanonicalEvent]:
        return self._first(
            e
            for e in self.all()
            if e.source != exclude_source and extract_url_id(e.source_url) == url_id
        )

    def find_root_candidates_at(self, start_at: datetime) -> list[CanonicalEvent]:
        return [
            e
            for e in self.all()
            if e.is_root and e.start_at == start_at and e.status != "rejected"
        ]

    def insert(self, fields: dict[str, Any]) -> CanonicalEvent:
        with self._lock:
            for existing in self._events.values():
                if (existing.source, existing.source_event_id) == (
                    fields["source"],
                    fields["source_event_id"],
                ):
                    raise ConflictError("events_source_event_unique")
                if existing.source_url == fields["source_url"]:
                    raise ConflictError("events_source_url_unique")
            now = _now()
            event = CanonicalEvent.model_validate(
                {**fields, "id": self._next_id, "created_at": now, "updated_at": now}
            )
            self._events[event.id] = event
            self._next_id += 1
            return event

    def update(self, event_id: int, changes: dict[str, Any]) -> None:
        with self._lock:
            current = self._events[event_id]
            self._events[event_id] = current.model_copy(update={**changes, "updated_at": _now()})

    def increment_attempts(self, event_id: int) -> int:
        with self._lock:
            attempts = self._events[event_id].enrichment_attempts + 1
            self.update(event_id, {"enrichment_attempts": attempts})
            return attempts

    def _visible(self) -> list[CanonicalEvent]:
        return [e for e in self.all() if e.status != "rejected" and e.is_active and e.is_root]

    def find_active(
        self,
        start: datetime,
        end: datetime,
        age_min: Optional[int],
        age_max: Optional[int],
        limit: int,
    ) -> list[CanonicalEvent]:
        events = [
            e
            for e in self._visible()
            if start <= e.start_at <= end and _age_overlaps(e, age_min, age_max)
        ]
        return sorted(events, key=lambda e: e.start_at)[:limit]

    def find_created_since(
        self,
        since: datetime,
        age_min: Optional[int],
        age_max: Optional[int],
        limit: int,
    ) -> list[CanonicalEvent]:
        events = [
            e
            for e in self._visible()
            if e.created_at is not None
            and e.created_at >= since
            and _age_overlaps(e, age_min, age_max)
        ]
        return sorted(events, key=lambda e: e.start_at)[:limit]

    def find_enrichment_candidates(
        self,
        limit: int,
        retry_failed: bool,
        max_attempts: int,
    ) -> list[int]:
        events = []
        for e in self._visible():
            if e.enrichment_attempts >= max_attempts:
                continue
            if retry_failed:
                if e.enriched_at is None and e.enrichment_attempts > 0:
                    events.append(e)
            elif e.short_summary is None:
                events.append(e)
        return [e.id for e in sorted(events, key=lambda e: e.start_at)[:limit]]

    def deactivate_before(self, cutoff: datetime) -> int:
        count = 0
        with self._lock:
            for e in self.all():
                if not e.is_active:
                    continue
                ended_at = e.end_at if e.end_at is not None else e.start_at
                if ended_at < cutoff:
                    self.update(e.id, {"is_active": False})
                    count += 1
        return count

    @staticmethod
    def _first(events: Iterable[CanonicalEvent]) -> Optional[CanonicalEvent]:
        return next(iter(events), None)


class MemoryEnrichmentLogStore:
    """EnrichmentLogStore backed by a dict keyed by id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[int, EnrichmentLogEntry] = {}
        self._next_id = 1

    def all(self) -> list[EnrichmentLogEntry]:
        with self._lock:
            return sorted(self._entries.values(), key=lambda e: e.id)

    def _add(self, **values: Any) -> int:
        with self._lock:
            now = _now()
            entry = EnrichmentLogEntry(id=self._next_id, created_at=now, updated_at=now, **values)
            self._entries[entry.id] = entry
            self._next_id += 1
            return entry.id

    def create_pending(self, event_id: int, mode: LogMode, prompt: str) -> int:
        return self._add(event_id=event_id, mode=mode, prompt=prompt, status="pending")

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
        with self._lock:
            entry = self._entries[log_id]
            if entry.status in TERMINAL_LOG_STATUSES:
                return False
            self._entries[log_id] = entry.model_copy(
                update={
                    "status": status,
                    "response": response,
                    "duration_ms": duration_ms,
                    "error": error,
                    "tokens_prompt": tokens_prompt,
                    "tokens_completion": tokens_completion,
                    "updated_at": _now(),
                }
            )
            return True

    def record(
        self,
        event_id: int,
        mode: LogMode,
        prompt: str,
        response: Optional[str],
        status: LogStatus,
    ) -> int:
        return self._add(
            event_id=event_id, mode=mode, prompt=prompt, response=response, status=status
        )

    def get(self, log_id: int) -> Optional[EnrichmentLogEntry]:
        with self._lock:
            return self._entries.get(log_id)
