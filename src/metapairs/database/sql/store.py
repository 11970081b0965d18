from __future__ import annotations

import logging

from sqlalchemy import Table
from sqlalchemy.engine import Engine

from metapairs.database.interfaces import Database
from metapairs.database.repositories import MetaRepo
from metapairs.database.sql.repositories import SQLMetaRepo
from metapairs.database.sql.schema import DDLMode, ParentLink, build_pairs_table, ensure_table, validate_identifier
from metapairs.database.sql.session import SessionManager

logger = logging.getLogger(__name__)


class SQLStore(Database):
    """Shared wiring for the SQLAlchemy backends.

    Subclasses only decide how the engine is created (``_build_sessions``).
    """

    meta_repo: MetaRepo
    table: Table

    def __init__(
        self,
        *,
        dsn: str,
        table_name: str = "pairs",
        ddl_mode: DDLMode = "create",
        parent: ParentLink | None = None,
        echo: bool = False,
    ) -> None:
        self.dsn = dsn
        self.table_name = validate_identifier(table_name)
        self.ddl_mode = ddl_mode
        self.echo = echo
        self._sessions = self._build_sessions()
        try:
            self.table = build_pairs_table(
                self.table_name,
                dialect_name=self._sessions.engine.dialect.name,
                parent=parent,
            )
            ensure_table(self._sessions.engine, self.table, ddl_mode=ddl_mode)
        except Exception:
            self._sessions.close()
            raise
        self.meta_repo = SQLMetaRepo(table=self.table, sessions=self._sessions)

    def _build_sessions(self) -> SessionManager:
        return SessionManager(dsn=self.dsn, engine_kwargs={"echo": self.echo})

    @property
    def engine(self) -> Engine:
        return self._sessions.engine

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    def close(self) -> None:
        """Dispose the connection pool."""
        self._sessions.close()


__all__ = ["SQLStore"]
