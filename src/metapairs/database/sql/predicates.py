"""Comparison predicates on the normalized grouping key.

``ref IS NULL`` and ``ref = :ref`` need different SQL; comparing the
generated ``ref_key`` column against :func:`normalize_ref` needs only one and
matches the unique constraint used for upserts.
"""

from __future__ import annotations

from sqlalchemy import Table, and_
from sqlalchemy.sql.elements import ColumnElement

from metapairs.database.models import normalize_ref, validate_key


def ref_clause(table: Table, ref: int | None) -> ColumnElement[bool]:
    return table.c.ref_key == normalize_ref(ref)


def pair_clause(table: Table, key: str, ref: int | None) -> ColumnElement[bool]:
    return and_(table.c.key == validate_key(key), ref_clause(table, ref))


__all__ = ["pair_clause", "ref_clause"]
