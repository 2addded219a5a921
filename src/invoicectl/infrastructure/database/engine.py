"""SQLite engine factory for the invoice ledger.

pysqlite normally defers ``BEGIN`` until the first write, so two commands
could read the same snapshot and both pass their guards. The engine takes
over transaction control instead: every transaction issues an explicit
``BEGIN``, and connections obtained through :func:`for_writes` issue
``BEGIN IMMEDIATE``, taking the write lock before the first read. WAL keeps
plain readers unblocked while a writer holds the lock.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine

from invoicectl.infrastructure.database.schema import metadata

DEFAULT_LOCK_TIMEOUT = 5.0

_BEGIN_MODE = "invoicectl_begin"


def create_db_engine(db_path: Path, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> Engine:
    """Create a SQLite engine with WAL, foreign keys and explicit transactions.

    *lock_timeout* is how many seconds a writer waits for another writer
    before SQLite reports the database as locked.
    """
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"timeout": lock_timeout},
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn: Any, _record: Any) -> None:
        # Leave BEGIN to the "begin" hook below.
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn: Connection) -> None:
        mode = conn.get_execution_options().get(_BEGIN_MODE, "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")

    return engine


def for_writes(engine: Engine) -> Engine:
    """Return a view of *engine* whose transactions start with ``BEGIN IMMEDIATE``."""
    return engine.execution_options(**{_BEGIN_MODE: "IMMEDIATE"})


def init_database(db_path: Path, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> Engine:
    """Create the ledger file and its tables, returning the engine.

    Missing parent directories are created; existing tables are left alone.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path, lock_timeout=lock_timeout)
    metadata.create_all(engine)
    return engine
