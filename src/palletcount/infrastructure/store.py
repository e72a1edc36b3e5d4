"""CountStore — the single dependency injected into every service.

Owns the database engine and the resolved settings. Services open their
own transaction boundaries via :meth:`CountStore.transaction`, which
commits on success and rolls back on any exception.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from palletcount.infrastructure.database.engine import init_database

if TYPE_CHECKING:
    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from palletcount.config.settings import CountSettings

logger = logging.getLogger(__name__)


class CountStore:
    """Repository encapsulating database access for catalog and counts.

    Constructed lazily by the CLI context from :class:`CountSettings`.
    """

    def __init__(self, settings: CountSettings) -> None:
        self._settings = settings
        self._engine: Engine = init_database(settings.db_path)
        logger.debug("Opened store at %s", settings.db_path)

    @property
    def root(self) -> Path:
        return self._settings.root

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def settings(self) -> CountSettings:
        return self._settings

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Yield a connection inside a transaction.

        Usage::

            with store.transaction() as conn:
                conn.execute(insert(products).values(...))
        """
        with self._engine.begin() as conn:
            yield conn

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self._engine.dispose()
