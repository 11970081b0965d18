from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Table
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from metapairs.database.errors import ConstraintViolation, StorageUnavailable
from metapairs.database.sql.session import SessionManager


@contextmanager
def translate_errors(operation: str, table_name: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as metapairs storage errors."""
    try:
        yield
    except IntegrityError as exc:
        msg = f"{operation} on {table_name!r} violated a constraint: {exc.orig}"
        raise ConstraintViolation(msg) from exc
    except SQLAlchemyError as exc:
        msg = f"{operation} on {table_name!r} failed: {exc}"
        raise StorageUnavailable(msg) from exc


class SQLRepoBase:
    def __init__(self, *, table: Table, sessions: SessionManager) -> None:
        self._table = table
        self._sessions = sessions

    @property
    def table_name(self) -> str:
        return self._table.name


__all__ = ["SQLRepoBase", "translate_errors"]
