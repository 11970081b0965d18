from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import Executable

from metapairs.database.models import (
    MetaRecord,
    compile_key_pattern,
    now_epoch,
    validate_key,
    validate_ref,
)
from metapairs.database.repositories.meta import MetaRepo
from metapairs.database.serialization import decode_value, encode_value
from metapairs.database.sql.predicates import pair_clause, ref_clause
from metapairs.database.sql.repositories.base import SQLRepoBase, translate_errors

logger = logging.getLogger(__name__)


def build_upsert(table: Table, row: dict[str, Any], dialect_name: str) -> Executable | None:
    """Single-statement upsert on ``(key, ref_key)``, or None when the dialect has none."""
    if dialect_name in {"sqlite", "postgresql"}:
        dialect_insert = sqlite_insert if dialect_name == "sqlite" else pg_insert
        stmt = dialect_insert(table).values(**row)
        return stmt.on_conflict_do_update(
            index_elements=[table.c.key, table.c.ref_key],
            set_={"value": stmt.excluded["value"], "epoch": stmt.excluded["epoch"]},
        )
    if dialect_name in {"mysql", "mariadb"}:
        stmt = mysql_insert(table).values(**row)
        return stmt.on_duplicate_key_update({"value": stmt.inserted["value"], "epoch": stmt.inserted["epoch"]})
    return None


class SQLMetaRepo(SQLRepoBase, MetaRepo):
    """Pairs stored in a relational table through SQLAlchemy.

    ``set_meta`` is a single conditional insert arbitrated by the unique
    constraint on ``(key, ref_key)``; it never reads before it writes.
    """

    def set_meta(self, key: str, value: Any, *, ref: int | None = None) -> bool:
        row = {
            "ref": validate_ref(ref),
            "key": validate_key(key),
            "value": encode_value(value),
            "epoch": now_epoch(),
        }
        with translate_errors("set", self.table_name), self._sessions.session() as session:
            with session.begin():
                self._upsert(session, row)
        logger.debug("Upserted pair %r (ref=%s) into %s", key, ref, self.table_name)
        return True

    def _upsert(self, session: Session, row: dict[str, Any]) -> None:
        stmt = build_upsert(self._table, row, session.get_bind().dialect.name)
        if stmt is None:
            self._upsert_with_savepoint(session, row)
            return
        session.execute(stmt)

    def _upsert_with_savepoint(self, session: Session, row: dict[str, Any]) -> None:
        # Dialects without a native upsert: the unique constraint still rejects the losing insert.
        try:
            with session.begin_nested():
                session.execute(insert(self._table).values(**row))
        except IntegrityError:
            result = session.execute(
                update(self._table)
                .where(pair_clause(self._table, row["key"], row["ref"]))
                .values(value=row["value"], epoch=row["epoch"])
            )
            if result.rowcount == 0:
                raise

    def get_record(self, key: str, *, ref: int | None = None) -> MetaRecord | None:
        table = self._table
        stmt = select(table.c.id, table.c.ref, table.c.key, table.c.value, table.c.epoch).where(
            pair_clause(table, key, ref)
        )
        with translate_errors("get", self.table_name), self._sessions.session() as session:
            row = session.execute(stmt).mappings().first()
        if row is None:
            return None
        return MetaRecord(
            id=row["id"],
            ref=row["ref"],
            key=row["key"],
            value=decode_value(row["value"]),
            epoch=row["epoch"],
        )

    def get_meta(self, key: str, *, ref: int | None = None, want_epoch: bool = False) -> Any:
        column = self._table.c.epoch if want_epoch else self._table.c.value
        stmt = select(column).where(pair_clause(self._table, key, ref))
        with translate_errors("get", self.table_name), self._sessions.session() as session:
            row = session.execute(stmt).first()
        if row is None:
            return None
        if want_epoch:
            return int(row[0])
        return decode_value(row[0])

    def remove_meta(self, key: str, *, ref: int | None = None) -> bool:
        stmt = delete(self._table).where(pair_clause(self._table, key, ref))
        with translate_errors("remove", self.table_name), self._sessions.session() as session:
            with session.begin():
                removed = session.execute(stmt).rowcount > 0
        if removed:
            logger.debug("Removed pair %r (ref=%s) from %s", key, ref, self.table_name)
        return removed

    def list_meta(self, *, ref: int | None = None, pattern: str | None = None) -> dict[str, Any]:
        table = self._table
        matcher = compile_key_pattern(pattern)
        stmt = select(table.c.key, table.c.value).where(ref_clause(table, ref)).order_by(table.c.id)
        with translate_errors("list", self.table_name), self._sessions.session() as session:
            rows = session.execute(stmt).all()
        result: dict[str, Any] = {}
        for row_key, payload in rows:
            if matcher is not None and matcher.search(row_key) is None:
                continue
            result[row_key] = decode_value(payload)
        return result


__all__ = ["SQLMetaRepo", "build_upsert"]
