"""Ingestion runner."""

from __future__ import annotations

from typing import Optional

import psycopg

from fep.db.locks import source_lock
from fep.enrichment.queue import EnrichmentQueue
from fep.ingestion.adapters import SourceAdapter
from fep.ingestion.run_log import complete_run_failed, complete_run_success, create_run
from fep.utils.logging import get_logger


logger = get_logger(__name__)


def run_source(
    adapter: SourceAdapter,
    days: int,
    conn: psycopg.Connection,
    queue: Optional[EnrichmentQueue] = None,
) -> Optional[int]:
    """Run one source adapter under its advisory lock.

    Returns the upserted count, or None when another run for the same
    source holds the lock.
    """
    with source_lock(conn, adapter.source) as acquired:
        if not acquired:
            logger.warning("ingestion.locked source=%s", adapter.source)
            return None

        with conn.cursor() as cursor:
            run_id = create_run(cursor, adapter.source, days)
        logger.info("ingestion.start run_id=%s source=%s days=%s", run_id, adapter.source, days)

        try:
            upserted = adapter.run(days)
        except Exception as exc:
            with conn.cursor() as cursor:
                complete_run_failed(cursor, run_id, exc)
            logger.exception("ingestion.failed run_id=%s source=%s", run_id, adapter.source)
            raise

        with conn.cursor() as cursor:
            complete_run_success(cursor, run_id, upserted)
        logger.info(
            "ingestion.complete run_id=%s source=%s upserted=%s",
            run_id,
            adapter.source,
            upserted,
        )

    if queue is not None:
        queue.join()
    return upserted
