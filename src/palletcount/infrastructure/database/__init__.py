"""SQLite database engine and schema via SQLAlchemy Core."""

from palletcount.infrastructure.database.engine import create_db_engine, init_database
from palletcount.infrastructure.database.schema import (
    count_sessions,
    line_items,
    metadata,
    products,
)

__all__ = [
    "count_sessions",
    "create_db_engine",
    "init_database",
    "line_items",
    "metadata",
    "products",
]
