"""Ingest run logging helpers."""

from __future__ import annotations

from psycopg import Cursor
from psycopg.types.json import Jsonb


def create_run(cursor: Cursor, source: str, days_window: int) -> int:
    cursor.execute(
        "insert into ingest_runs (source, days_window, status) "
        "values (%s, %s, 'running') returning run_id",
        (source, days_window),
    )
    return int(cursor.fetchone()[0])


def complete_run_success(cursor: Cursor, run_id: int, upserted_count: int) -> None:
    cursor.execute(
        "update ingest_runs set status = 'success', finished_at = now(), "
        "upserted_count = %s where run_id = %s",
        (upserted_count, run_id),
    )


def complete_run_failed(cursor: Cursor, run_id: int, error: Exception) -> None:
    cursor.execute(
        "update ingest_runs set status = 'failed', finished_at = now(), "
        "error_json = %s where run_id = %s",
        (
            Jsonb({"error": str(error), "type": type(error).__name__}),
            run_id,
        ),
    )
