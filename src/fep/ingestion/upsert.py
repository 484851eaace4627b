"""Upsert of normalized records into the catalog."""

from __future__ import annotations

from typing import Any, Callable, Optional

from fep.db.repository import EventRepository
from fep.errors import ConflictError
from fep.ingestion.duplicates import DuplicateResolver
from fep.ingestion.fingerprint import fingerprint
from fep.models import SHARED_DERIVED_FIELDS, CanonicalEvent, EventRecord
from fep.utils.logging import get_logger
from fep.utils.time import DEFAULT_TIMEZONE


logger = get_logger(__name__)

Dispatch = Callable[[int], None]


def changed_fields(event: CanonicalEvent, fields: dict[str, Any]) -> dict[str, Any]:
    """Return the subset of fields whose value differs from the stored event.

    Values that enrichment may also fill are left alone when the scraper
    sends None for them.
    """
    changes: dict[str, Any] = {}
    for name, value in fields.items():
        if value is None and name in SHARED_DERIVED_FIELDS:
            continue
        if getattr(event, name) != value:
            changes[name] = value
    return changes


class UpsertCoordinator:
    """Decide between same-source update, duplicate link and new root."""

    def __init__(
        self,
        repo: EventRepository,
        resolver: Optional[DuplicateResolver] = None,
        dispatch: Optional[Dispatch] = None,
        tz_name: str = DEFAULT_TIMEZONE,
    ) -> None:
        self.repo = repo
        self.resolver = resolver or DuplicateResolver(repo)
        self.dispatch = dispatch
        self.tz_name = tz_name

    def upsert(self, record: EventRecord) -> bool:
        """Persist a record; return True if anything was written."""
        if record.fingerprint == "":
            record = record.model_copy(
                update={
                    "fingerprint": fingerprint(
                        record.title, record.start_at, record.venue, self.tz_name
                    )
                }
            )

        existing = self.repo.find_by_source_id(record.source, record.source_event_id)
        if existing is not None:
            return self._update(existing, record)

        fields = record.to_fields()
        duplicate = self.resolver.find_duplicate_candidate(record)
        if duplicate is not None:
            fields["duplicate_of_event_id"] = self.resolver.resolve_root_id(duplicate)
        fields["status"] = "new"

        try:
            created = self.repo.insert(fields)
        except ConflictError:
            # A concurrent run inserted the same source id first.
            existing = self.repo.find_by_source_id(record.source, record.source_event_id)
            if existing is None:
                raise
            logger.info(
                "upsert.race_lost source=%s source_event_id=%s event_id=%s",
                record.source,
                record.source_event_id,
                existing.id,
            )
            return self._update(existing, record)

        if created.duplicate_of_event_id is not None:
            logger.info(
                "upsert.duplicate source=%s event_id=%s root_id=%s",
                record.source,
                created.id,
                created.duplicate_of_event_id,
            )
            return True

        logger.info("upsert.created source=%s event_id=%s", record.source, created.id)
        if self.dispatch is not None:
            self.dispatch(created.id)
        return True

    def _update(self, event: CanonicalEvent, record: EventRecord) -> bool:
        changes = changed_fields(event, record.to_fields())
        if not changes:
            return False
        self.repo.update(event.id, changes)
        logger.debug(
            "upsert.updated event_id=%s fields=%s", event.id, ",".join(sorted(changes))
        )
        return True
