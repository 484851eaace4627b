"""Enrichment attempt log in PostgreSQL."""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg.rows import dict_row

from fep.models import EnrichmentLogEntry, LogMode, LogStatus


class PostgresEnrichmentLogStore:
    """EnrichmentLogStore over event_enrichment_logs."""

    def __init__(self, conn: psycopg.Connection) -> None:
        self.conn = conn

    def create_pending(self, event_id: int, mode: LogMode, prompt: str) -> int:
        with self.conn.cursor() as cursor:
            cursor.execute(
                "insert into event_enrichment_logs (event_id, mode, prompt, status) "
                "values (%s, %s, %s, 'pending') returning id",
                (event_id, mode, prompt),
            )
            return int(cursor.fetchone()[0])

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
        # Only the pending -> terminal transition is allowed.
        with self.conn.cursor() as cursor:
            cursor.execute(
                "update event_enrichment_logs set status = %s, response = %s, "
                "duration_ms = %s, error = %s, tokens_prompt = %s, "
                "tokens_completion = %s, updated_at = now() "
                "where id = %s and status = 'pending'",
                (
                    status,
                    response,
                    duration_ms,
                    error,
                    tokens_prompt,
                    tokens_completion,
                    log_id,
                ),
            )
            return cursor.rowcount == 1

    def record(
        self,
        event_id: int,
        mode: LogMode,
        prompt: str,
        response: Optional[str],
        status: LogStatus,
    ) -> int:
        with self.conn.cursor() as cursor:
            cursor.execute(
                "insert into event_enrichment_logs (event_id, mode, prompt, response, status) "
                "values (%s, %s, %s, %s, %s) returning id",
                (event_id, mode, prompt, response, status),
            )
            return int(cursor.fetchone()[0])

    def get(self, log_id: int) -> Optional[EnrichmentLogEntry]:
        with self.conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute("select * from event_enrichment_logs where id = %s", (log_id,))
            row = cursor.fetchone()
        return EnrichmentLogEntry.model_validate(row) if row else None
