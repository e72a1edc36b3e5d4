"""Database engine setup for SQLite with WAL mode.

The DB is stored at {root}/.palletcount/palletcount.db by default.
Tables are SQLAlchemy Core; there is no ORM layer.

Every connection gets a ``casefold(text)`` SQL function so product search
folds case the same way :func:`palletcount.domain.matching.resolve` does.
SQLite's own ``lower()`` only folds ASCII.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from palletcount.infrastructure.database.schema import metadata


def _casefold(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL mode, foreign keys and ``casefold()``."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn: Any, _: Any) -> None:
        dbapi_conn.create_function("casefold", 1, _casefold, deterministic=True)
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def init_database(db_path: Path) -> Engine:
    """Create the database file and all tables at *db_path*.

    Idempotent — safe to call on an existing store.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path)
    metadata.create_all(engine)
    return engine
