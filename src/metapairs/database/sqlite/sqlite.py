"""SQLite database store implementation for metapairs."""

from __future__ import annotations

import logging

from metapairs.database.sql.schema import DDLMode, ParentLink
from metapairs.database.sql.session import SessionManager
from metapairs.database.sql.store import SQLStore
from metapairs.database.sqlite.session import SQLiteSessionManager

logger = logging.getLogger(__name__)


class SQLiteStore(SQLStore):
    """SQLite database store.

    Every connection enforces foreign keys and starts its transactions with
    ``BEGIN IMMEDIATE``, so concurrent writers wait on the database lock for
    up to ``busy_timeout`` seconds rather than failing.

    An in-memory database (``sqlite://``) is private to the thread that
    opened it; use a file for stores shared between threads.

    Attributes:
        dsn: SQLAlchemy URL, e.g. ``sqlite:///path/to/pairs.db``.
        table_name: Namespace table holding the pairs.
        meta_repo: Repository for the pairs.
    """

    def __init__(
        self,
        *,
        dsn: str,
        table_name: str = "pairs",
        ddl_mode: DDLMode = "create",
        parent: ParentLink | None = None,
        busy_timeout: float = 30.0,
        echo: bool = False,
    ) -> None:
        self.busy_timeout = busy_timeout
        super().__init__(dsn=dsn, table_name=table_name, ddl_mode=ddl_mode, parent=parent, echo=echo)
        logger.debug("SQLite store ready on %s (table %s)", dsn, table_name)

    def _build_sessions(self) -> SessionManager:
        return SQLiteSessionManager(dsn=self.dsn, busy_timeout=self.busy_timeout, echo=self.echo)


__all__ = ["SQLiteStore"]
