"""Advisory locks that keep per-source runs from overlapping."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import psycopg


@contextmanager
def source_lock(conn: psycopg.Connection, source: str) -> Iterator[bool]:
    """Try to take the session lock for a source; yield whether it was acquired."""
    key = f"ingest:{source}"
    with conn.cursor() as cursor:
        cursor.execute("select pg_try_advisory_lock(hashtext(%s))", (key,))
        acquired = bool(cursor.fetchone()[0])
    try:
        yield acquired
    finally:
        if acquired:
            with conn.cursor() as cursor:
                cursor.execute("select pg_advisory_unlock(hashtext(%s))", (key,))
