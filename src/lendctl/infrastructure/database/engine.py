"""Database engine setup for the SQLite ledger.

Every transaction is opened with ``BEGIN IMMEDIATE`` so the reserved write
lock is taken up front: two processes running check-then-act sequences
(count loans then insert, count queue then insert) are serialized by the
database instead of interleaving. ``busy_timeout`` bounds how long a writer
waits for the lock before SQLite reports ``database is locked``.

SQLAlchemy Core (not ORM) is used: every engine operation is a short,
explicit sequence of statements inside one unit of work.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine

from lendctl.infrastructure.database.schema import metadata


def create_db_engine(db_path: Path, *, busy_timeout_ms: int = 5000) -> Engine:
    """Create a SQLite engine with WAL mode, foreign keys and immediate transactions."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        # Hand transaction control to SQLAlchemy so the "begin" hook below
        # decides how transactions start.
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn: Connection) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def init_database(db_path: Path, *, busy_timeout_ms: int = 5000) -> Engine:
    """Initialize the ledger database at *db_path*.

    Creates the parent directory and all tables and indexes from
    :data:`schema.metadata`. Idempotent — safe to call on an existing ledger.

    Returns the engine ready for use.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path, busy_timeout_ms=busy_timeout_ms)
    metadata.create_all(engine)
    return engine
