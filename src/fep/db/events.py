"""PostgreSQL event repository."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

import psycopg
from psycopg import errors, sql
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from fep.errors import ConflictError
from fep.ingestion.fingerprint import URL_ID_PATTERN
from fep.models import CanonicalEvent
from fep.utils.logging import get_logger


logger = get_logger(__name__)

URL_ID_SQL = URL_ID_PATTERN.pattern

JSON_COLUMNS = frozenset({"tags", "title_i18n", "summary_i18n", "short_summary_i18n"})

WRITABLE_COLUMNS = frozenset(
    CanonicalEvent.model_fields.keys() - {"id", "created_at", "updated_at"}
)

AGE_FILTER_SQL = (
    " and (%(age_max)s::int is null or age_min is null or age_min <= %(age_max)s)"
    " and (%(age_min)s::int is null or age_max is null or age_max >= %(age_min)s)"
)

VISIBLE_SQL = (
    "status <> 'rejected' and is_active and duplicate_of_event_id is null"
)


def _adapt(column: str, value: Any) -> Any:
    if column in JSON_COLUMNS and value is not None:
        return Jsonb(value)
    return value


class PostgresEventRepository:
    """EventRepository on top of a single autocommit connection.

    Every statement is its own transaction, so rows written by one call are
    visible to concurrent ingestion runs right away.
    """

    def __init__(self, conn: psycopg.Connection) -> None:
        self.conn = conn

    def _fetch_one(self, query: str, params: Any) -> Optional[CanonicalEvent]:
        with self.conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(query, params)
            row = cursor.fetchone()
        return CanonicalEvent.model_validate(row) if row else None

    def _fetch_all(self, query: str, params: Any) -> list[CanonicalEvent]:
        with self.conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(query, params)
            rows = cursor.fetchall()
        return [CanonicalEvent.model_validate(row) for row in rows]

    def get(self, event_id: int) -> Optional[CanonicalEvent]:
        return self._fetch_one("select * from events where id = %s", (event_id,))

    def find_by_source_id(self, source: str, source_event_id: str) -> Optional[CanonicalEvent]:
        return self._fetch_one(
            "select * from events where source = %s and source_event_id = %s",
            (source, source_event_id),
        )

    def find_root_by_fingerprint(self, fingerprint: str) -> Optional[CanonicalEvent]:
        return self._fetch_one(
            "select * from events where fingerprint = %s "
            "and duplicate_of_event_id is null order by id limit 1",
            (fingerprint,),
        )

    def find_by_url_id(self, url_id: str, exclude_source: str) -> Optional[CanonicalEvent]:
        return self._fetch_one(
            "select * from events where substring(source_url from %s) = %s "
            "and source <> %s order by id limit 1",
            (URL_ID_SQL, url_id, exclude_source),
        )

    def find_root_candidates_at(self, start_at: datetime) -> list[CanonicalEvent]:
        return self._fetch_all(
            "select * from events where start_at = %s and status <> 'rejected' "
            "and duplicate_of_event_id is null order by id",
            (start_at,),
        )

    def insert(self, fields: dict[str, Any]) -> CanonicalEvent:
        columns = [name for name in fields if name in WRITABLE_COLUMNS]
        query = sql.SQL("insert into events ({}) values ({}) returning *").format(
            sql.SQL(", ").join(map(sql.Identifier, columns)),
            sql.SQL(", ").join([sql.Placeholder()] * len(columns)),
        )
        values = [_adapt(name, fields[name]) for name in columns]
        try:
            with self.conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(query, values)
                row = cursor.fetchone()
        except errors.UniqueViolation as exc:
            constraint = exc.diag.constraint_name or "unique"
            logger.info(
                "events.insert_conflict source=%s source_event_id=%s constraint=%s",
                fields.get("source"),
                fields.get("source_event_id"),
                constraint,
            )
            raise ConflictError(constraint) from exc
        return CanonicalEvent.model_validate(row)

    def update(self, event_id: int, changes: dict[str, Any]) -> None:
        columns = [name for name in changes if name in WRITABLE_COLUMNS]
        if not columns:
            return
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(name)) for name in columns
        )
        query = sql.SQL("update events set {}, updated_at = now() where id = %s").format(
            assignments
        )
        values = [_adapt(name, changes[name]) for name in columns]
        with self.conn.cursor() as cursor:
            cursor.execute(query, [*values, event_id])

    def increment_attempts(self, event_id: int) -> int:
        with self.conn.cursor() as cursor:
            cursor.execute(
                "update events set enrichment_attempts = enrichment_attempts + 1, "
                "updated_at = now() where id = %s returning enrichment_attempts",
                (event_id,),
            )
            row = cursor.fetchone()
        return int(row[0]) if row else 0

    def find_active(
        self,
        start: datetime,
        end: datetime,
        age_min: Optional[int],
        age_max: Optional[int],
        limit: int,
    ) -> list[CanonicalEvent]:
        return self._fetch_all(
            f"select * from events where {VISIBLE_SQL} "
            "and start_at between %(start)s and %(end)s"
            + AGE_FILTER_SQL
            + " order by start_at limit %(limit)s",
            {"start": start, "end": end, "age_min": age_min, "age_max": age_max, "limit": limit},
        )

    def find_created_since(
        self,
        since: datetime,
        age_min: Optional[int],
        age_max: Optional[int],
        limit: int,
    ) -> list[CanonicalEvent]:
        return self._fetch_all(
            f"select * from events where {VISIBLE_SQL} and created_at >= %(since)s"
            + AGE_FILTER_SQL
            + " order by start_at limit %(limit)s",
            {"since": since, "age_min": age_min, "age_max": age_max, "limit": limit},
        )

    def find_enrichment_candidates(
        self,
        limit: int,
        retry_failed: bool,
        max_attempts: int,
    ) -> list[int]:
        if retry_failed:
            condition = "enriched_at is null and enrichment_attempts > 0"
        else:
            condition = "short_summary is null"
        with self.conn.cursor() as cursor:
            cursor.execute(
                f"select id from events where {VISIBLE_SQL} and {condition} "
                "and enrichment_attempts < %s order by start_at limit %s",
                (max_attempts, limit),
            )
            return [int(row[0]) for row in cursor.fetchall()]

    def deactivate_before(self, cutoff: datetime) -> int:
        with self.conn.cursor() as cursor:
            cursor.execute(
                "update events set is_active = false, updated_at = now() "
                "where is_active and ("
                "end_at < %(cutoff)s or (end_at is null and start_at < %(cutoff)s))",
                {"cutoff": cutoff},
            )
            return cursor.rowcount
