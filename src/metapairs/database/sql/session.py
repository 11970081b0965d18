from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker


class SessionManager:
    """Owns the engine (connection pool) shared by every repository of a store."""

    def __init__(self, *, dsn: str, engine_kwargs: dict[str, Any] | None = None) -> None:
        self.dsn = dsn
        self.engine: Engine = create_engine(dsn, **(engine_kwargs or {}))
        self._factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    @contextmanager
    def session(self) -> Iterator[Session]:
        with self._factory() as session:
            yield session

    def close(self) -> None:
        self.engine.dispose()


__all__ = ["SessionManager"]
