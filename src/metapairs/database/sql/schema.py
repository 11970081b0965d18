"""Table layout for a pairs namespace and its provisioning."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Literal

from sqlalchemy import (
    BigInteger,
    Column,
    Computed,
    ForeignKeyConstraint,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    inspect,
    text,
)
from sqlalchemy.engine import Engine, Inspector
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import AddConstraint

from metapairs.database.errors import SchemaMismatch, StorageUnavailable
from metapairs.database.models import KEY_MAX_LENGTH, NULL_REF_SENTINEL

logger = logging.getLogger(__name__)

DDLMode = Literal["create", "validate"]
OnDelete = Literal["cascade", "restrict", "set null"]

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
REQUIRED_COLUMNS = ("id", "ref", "key", "value", "epoch", "ref_key")

_EPOCH_DEFAULTS = {
    "sqlite": "(CAST(strftime('%s', 'now') AS INTEGER))",
    "postgresql": "(CAST(EXTRACT(EPOCH FROM now()) AS BIGINT))",
    "mysql": "(UNIX_TIMESTAMP())",
    "mariadb": "(UNIX_TIMESTAMP())",
}


@dataclass(frozen=True)
class ParentLink:
    """Foreign key from ``ref`` to the owning table."""

    table: str
    column: str = "id"
    on_delete: OnDelete = "cascade"
    constraint: str | None = None


def validate_identifier(name: str) -> str:
    if not isinstance(name, str) or not IDENTIFIER_RE.match(name):
        msg = f"Invalid SQL identifier: {name!r}"
        raise ValueError(msg)
    return name


def build_pairs_table(
    table_name: str,
    *,
    dialect_name: str,
    metadata: MetaData | None = None,
    parent: ParentLink | None = None,
) -> Table:
    """Build the SQLAlchemy table for one namespace.

    ``ref_key`` is computed by the engine as ``COALESCE(ref, sentinel)`` and
    the unique constraint is declared on ``(key, ref_key)``, so two pairs with
    an absent ref collide the same way two pairs with equal refs do.
    """
    validate_identifier(table_name)
    metadata_obj = metadata if metadata is not None else MetaData()
    epoch_default = _EPOCH_DEFAULTS.get(dialect_name)
    # MySQL forbids cascading foreign key actions on the base column of a stored generated column.
    persisted = dialect_name not in {"mysql", "mariadb"}

    table_args: list[object] = [
        UniqueConstraint("key", "ref_key", name=f"uq_{table_name}__key_ref"),
        Index(f"ix_{table_name}__ref_key", "ref_key"),
    ]
    if parent is not None:
        validate_identifier(parent.table)
        validate_identifier(parent.column)
        if parent.constraint is not None:
            validate_identifier(parent.constraint)
        if parent.table not in metadata_obj.tables and parent.table != table_name:
            # Only lets the foreign key resolve; the parent table itself is never created here.
            Table(parent.table, metadata_obj, Column(parent.column, Integer, primary_key=True))
        table_args.append(
            ForeignKeyConstraint(
                ["ref"],
                [f"{parent.table}.{parent.column}"],
                name=parent.constraint,
                ondelete=parent.on_delete.upper(),
            )
        )

    return Table(
        table_name,
        metadata_obj,
        Column("id", BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True),
        Column("ref", Integer, nullable=True),
        Column("key", String(KEY_MAX_LENGTH), nullable=False),
        Column("value", Text, nullable=True),
        Column(
            "epoch",
            BigInteger,
            nullable=False,
            server_default=text(epoch_default) if epoch_default else None,
        ),
        Column("ref_key", Integer, Computed(f"COALESCE(ref, {NULL_REF_SENTINEL})", persisted=persisted)),
        *table_args,
        sqlite_autoincrement=True,
    )


def parent_link_constraint(table: Table) -> ForeignKeyConstraint | None:
    for constraint in table.constraints:
        if isinstance(constraint, ForeignKeyConstraint):
            return constraint
    return None


def _has_pair_uniqueness(inspector: Inspector, table_name: str) -> bool:
    wanted = {"key", "ref_key"}
    for constraint in inspector.get_unique_constraints(table_name):
        if set(constraint["column_names"]) == wanted:
            return True
    for index in inspector.get_indexes(table_name):
        if index.get("unique") and set(index["column_names"]) == wanted:
            return True
    return False


def _has_parent_link(inspector: Inspector, table_name: str, link: ForeignKeyConstraint) -> bool:
    for fk in inspector.get_foreign_keys(table_name):
        if link.name is not None and fk.get("name") == link.name:
            return True
        if fk["referred_table"] == link.referred_table.name and fk["constrained_columns"] == ["ref"]:
            return True
    return False


def _link_existing_table(engine: Engine, inspector: Inspector, table: Table) -> None:
    link = parent_link_constraint(table)
    if link is None or _has_parent_link(inspector, table.name, link):
        return
    if engine.dialect.name == "sqlite":
        # SQLite cannot add a constraint to an existing table.
        logger.warning(
            "Table %s already exists without a parent foreign key; link it with a migration",
            table.name,
        )
        return
    with engine.begin() as conn:
        conn.execute(AddConstraint(link))
    logger.info("Linked pairs table %s to parent %s", table.name, link.referred_table.name)


def ensure_table(engine: Engine, table: Table, *, ddl_mode: DDLMode = "create") -> bool:
    """Create ``table`` if absent (``create``) or check its layout (``validate``).

    In ``create`` mode an existing table also gets the parent foreign key when
    it lacks one. Returns True when the table was created by this call.
    """
    try:
        inspector = inspect(engine)
        exists = inspector.has_table(table.name)
        if ddl_mode == "validate":
            if not exists:
                msg = f"Table {table.name!r} does not exist"
                raise SchemaMismatch(msg)
            columns = {column["name"] for column in inspector.get_columns(table.name)}
            missing = [name for name in REQUIRED_COLUMNS if name not in columns]
            if missing:
                msg = f"Table {table.name!r} is missing columns: {missing}"
                raise SchemaMismatch(msg)
            if not _has_pair_uniqueness(inspector, table.name):
                msg = f"Table {table.name!r} has no unique constraint on (key, ref_key)"
                raise SchemaMismatch(msg)
            logger.debug("Validated pairs table %s", table.name)
            return False
        if exists:
            _link_existing_table(engine, inspector, table)
            logger.debug("Pairs table %s already exists", table.name)
            return False
        table.create(engine, checkfirst=True)
    except SQLAlchemyError as exc:
        msg = f"Failed to provision table {table.name!r}: {exc}"
        raise StorageUnavailable(msg) from exc
    logger.info("Created pairs table %s", table.name)
    return True


__all__ = [
    "DDLMode",
    "IDENTIFIER_RE",
    "OnDelete",
    "ParentLink",
    "REQUIRED_COLUMNS",
    "build_pairs_table",
    "ensure_table",
    "parent_link_constraint",
    "validate_identifier",
]
