from __future__ import annotations

from metapairs.database.sql.session import SessionManager
from metapairs.database.sql.store import SQLStore


class PostgresStore(SQLStore):
    """PostgreSQL store; upserts use ``INSERT ... ON CONFLICT (key, ref_key)``."""

    def _build_sessions(self) -> SessionManager:
        return SessionManager(dsn=self.dsn, engine_kwargs={"echo": self.echo, "pool_pre_ping": True})


__all__ = ["PostgresStore"]
