import pytest
from psycopg import errors

from fep.db.events import PostgresEventRepository
from fep.errors import ConflictError

from factories import at, make_record


class _Cursor:
    def __init__(self, conn):
        self.conn = conn

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return None

    def execute(self, query, params=None):
        self.conn.executed.append((query, params))
        if self.conn.error is not None:
            raise self.conn.error

    def fetchone(self):
        return self.conn.row


class _Connection:
    """Autocommit connection shared with other threads; must not open transactions."""

    def __init__(self, row=None, error=None):
        self.row = row
        self.error = error
        self.executed = []

    def cursor(self, **kwargs):
        return _Cursor(self)

    def transaction(self):
        raise AssertionError("single-statement writes must not open a transaction")


def _row(**fields):
    return {
        "id": 7,
        "created_at": at(2026, 3, 1),
        "updated_at": at(2026, 3, 1),
        **fields,
    }


def test_insert_runs_one_statement_without_transaction():
    fields = {**make_record().to_fields(), "fingerprint": "fp", "status": "new"}
    conn = _Connection(row=_row(**fields))

    event = PostgresEventRepository(conn).insert(fields)

    assert event.id == 7
    assert len(conn.executed) == 1


def test_insert_unique_violation_becomes_conflict():
    fields = {**make_record().to_fields(), "fingerprint": "fp", "status": "new"}
    conn = _Connection(error=errors.UniqueViolation("duplicate key"))

    with pytest.raises(ConflictError):
        PostgresEventRepository(conn).insert(fields)
