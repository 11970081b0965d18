from __future__ import annotations

from typing import Any

from sqlalchemy import event

from metapairs.database.sql.session import SessionManager


def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
    # Leave transaction control to the "begin" hook below instead of the driver.
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _on_begin(connection: Any) -> None:
    # Take the write lock up front; a deferred transaction that upgrades from
    # a shared lock fails with "database is locked" instead of waiting.
    # Reads begin here too, so they queue behind a running writer.
    connection.exec_driver_sql("BEGIN IMMEDIATE")


class SQLiteSessionManager(SessionManager):
    def __init__(self, *, dsn: str, busy_timeout: float = 30.0, echo: bool = False) -> None:
        super().__init__(
            dsn=dsn,
            engine_kwargs={
                "echo": echo,
                "connect_args": {"timeout": busy_timeout, "check_same_thread": False},
            },
        )
        event.listen(self.engine, "connect", _on_connect)
        event.listen(self.engine, "begin", _on_begin)


__all__ = ["SQLiteSessionManager"]
