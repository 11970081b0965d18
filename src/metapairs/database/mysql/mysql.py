from __future__ import annotations

from metapairs.database.sql.session import SessionManager
from metapairs.database.sql.store import SQLStore

# MySQL closes idle connections after wait_timeout (8h by default).
POOL_RECYCLE_SECONDS = 3600


class MySQLStore(SQLStore):
    """MySQL / MariaDB store; upserts use ``INSERT ... ON DUPLICATE KEY UPDATE``.

    ``ref_key`` is a virtual generated column here so the parent foreign key
    may cascade.
    """

    def _build_sessions(self) -> SessionManager:
        return SessionManager(
            dsn=self.dsn,
            engine_kwargs={"echo": self.echo, "pool_pre_ping": True, "pool_recycle": POOL_RECYCLE_SECONDS},
        )


__all__ = ["MySQLStore"]
