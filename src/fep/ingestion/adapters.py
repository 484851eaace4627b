"""Source adapter contract and the file-based adapter."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Protocol

import orjson

from fep.ingestion.upsert import UpsertCoordinator
from fep.models import EventRecord
from fep.utils.logging import get_logger
from fep.utils.time import DEFAULT_TIMEZONE, now_local


logger = get_logger(__name__)


class SourceAdapter(Protocol):
    source: str

    def run(self, days: int) -> int:
        """Scrape the next `days` days and return how many records were written."""


class BaseSourceAdapter:
    """Drive one source: produce raw items, parse, window-filter and upsert.

    Subclasses implement `iter_items` and `parse_item`. A failure on one item
    is logged and the run moves on to the next one.
    """

    source: str = ""

    def __init__(
        self,
        upserter: UpsertCoordinator,
        tz_name: str = DEFAULT_TIMEZONE,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.upserter = upserter
        self.tz_name = tz_name
        self.clock = clock or (lambda: now_local(tz_name))

    def iter_items(self) -> Iterable[Any]:
        raise NotImplementedError

    def parse_item(self, item: Any) -> Optional[EventRecord]:
        raise NotImplementedError

    def run(self, days: int = 30) -> int:
        now = self.clock()
        until = now + timedelta(days=days)
        upserted = 0
        skipped = 0
        for item in self.iter_items():
            try:
                record = self.parse_item(item)
                if record is None:
                    skipped += 1
                    continue
                if record.start_at < now or record.start_at >= until:
                    skipped += 1
                    continue
                if self.upserter.upsert(record):
                    upserted += 1
            except Exception as exc:
                logger.warning(
                    "adapter.item_failed source=%s item=%s error=%s",
                    self.source,
                    _describe(item),
                    exc,
                )
        logger.info(
            "adapter.complete source=%s days=%s upserted=%s skipped=%s",
            self.source,
            days,
            upserted,
            skipped,
        )
        return upserted


class JsonLinesAdapter(BaseSourceAdapter):
    """Read normalized records exported by an external scraper, one JSON object per line."""

    def __init__(self, source: str, path: Path, upserter: UpsertCoordinator, **kwargs: Any) -> None:
        super().__init__(upserter, **kwargs)
        self.source = source
        self.path = Path(path)

    def iter_items(self) -> Iterable[str]:
        with self.path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if line.strip():
                    yield line

    def parse_item(self, item: str) -> Optional[EventRecord]:
        payload = orjson.loads(item)
        if not isinstance(payload, dict):
            return None
        payload.setdefault("source", self.source)
        if payload["source"] != self.source:
            logger.warning(
                "adapter.source_mismatch expected=%s got=%s", self.source, payload["source"]
            )
            return None
        payload.setdefault("fingerprint", "")
        return EventRecord.model_validate(payload)


def _describe(item: Any) -> str:
    text = str(item).strip()
    return text[:80]
