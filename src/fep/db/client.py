"""Database connection helpers."""

from contextlib import contextmanager
from importlib import resources
from typing import Iterator, Optional

import psycopg

from fep.config import Settings


def get_connection(settings: Optional[Settings] = None, autocommit: bool = False) -> psycopg.Connection:
    """Create a new database connection."""
    settings = settings or Settings()
    return psycopg.connect(settings.get_database_url(), autocommit=autocommit)


@contextmanager
def db_cursor(settings: Optional[Settings] = None) -> Iterator[psycopg.Cursor]:
    """Yield a cursor with automatic commit/rollback."""
    conn = get_connection(settings)
    try:
        with conn.cursor() as cursor:
            yield cursor
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def load_schema() -> str:
    """Return the bundled DDL."""
    return resources.files("fep.db").joinpath("schema.sql").read_text(encoding="utf-8")


def apply_schema(settings: Optional[Settings] = None) -> None:
    """Create tables and indexes if they do not exist."""
    with db_cursor(settings) as cursor:
        cursor.execute(load_schema())
