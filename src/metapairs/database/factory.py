from __future__ import annotations

from typing import TYPE_CHECKING

from metapairs.database.inmemory import InMemoryStore
from metapairs.database.interfaces import Database
from metapairs.database.sql.schema import ParentLink

if TYPE_CHECKING:
    from metapairs.app.settings import DatabaseConfig, ParentLinkConfig


def _parent_link(config: ParentLinkConfig | None) -> ParentLink | None:
    if config is None:
        return None
    return ParentLink(
        table=config.table,
        column=config.column,
        on_delete=config.on_delete,
        constraint=config.constraint,
    )


def build_database(*, config: DatabaseConfig, table_name: str | None = None) -> Database:
    """Instantiate the backend selected by ``config.metadata_store.provider``."""
    store_config = config.metadata_store
    table = table_name or store_config.table_name
    provider = store_config.provider
    if provider == "inmemory":
        return InMemoryStore(table_name=table)

    dsn = store_config.dsn
    if not dsn:
        msg = f"metadata_store.dsn is required for provider={provider}"
        raise ValueError(msg)
    parent = _parent_link(store_config.parent)

    if provider == "sqlite":
        from metapairs.database.sqlite import SQLiteStore

        return SQLiteStore(
            dsn=dsn,
            table_name=table,
            ddl_mode=store_config.ddl_mode,
            parent=parent,
            busy_timeout=store_config.busy_timeout,
            echo=store_config.echo,
        )
    if provider == "postgres":
        from metapairs.database.postgres import PostgresStore

        return PostgresStore(
            dsn=dsn, table_name=table, ddl_mode=store_config.ddl_mode, parent=parent, echo=store_config.echo
        )
    if provider == "mysql":
        from metapairs.database.mysql import MySQLStore

        return MySQLStore(
            dsn=dsn, table_name=table, ddl_mode=store_config.ddl_mode, parent=parent, echo=store_config.echo
        )
    msg = f"Unsupported metadata store provider: {provider}"
    raise ValueError(msg)


__all__ = ["build_database"]
