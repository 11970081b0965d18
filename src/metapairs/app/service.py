from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel

from metapairs.app.settings import DatabaseConfig, load_database_config_from_env
from metapairs.database.factory import build_database
from metapairs.database.interfaces import Database
from metapairs.database.models import MetaRecord

TConfigModel = TypeVar("TConfigModel", bound=BaseModel)

logger = logging.getLogger(__name__)


class MetadataStore:
    """Key/value pairs attached to an optional owning row (``ref``).

    At most one pair exists per ``(key, ref)``; pairs without a ref share a
    single group. Values are stored as JSON text and returned decoded.

    >>> store = MetadataStore()
    >>> store.set("theme", {"dark": True}, ref=7)
    True
    >>> store.get("theme", ref=7)
    {'dark': True}
    """

    def __init__(
        self,
        *,
        table: str | None = None,
        database_config: DatabaseConfig | dict[str, Any] | None = None,
        database: Database | None = None,
    ) -> None:
        if database is not None:
            if table is not None:
                msg = "Pass either table or a prebuilt database; the database already names its table"
                raise ValueError(msg)
            self.database_config = self._validate_config(database_config, DatabaseConfig)
            self.database = database
        else:
            if database_config is None:
                database_config = load_database_config_from_env()
            self.database_config = self._validate_config(database_config, DatabaseConfig)
            self.database = build_database(config=self.database_config, table_name=table)
        logger.debug(
            "Metadata store on table %s (provider=%s)",
            self.database.table_name,
            self.database_config.metadata_store.provider,
        )

    @staticmethod
    def _validate_config(
        config: TConfigModel | dict[str, Any] | None,
        model_type: type[TConfigModel],
    ) -> TConfigModel:
        if isinstance(config, model_type):
            return config
        if config is None:
            return model_type()
        return model_type.model_validate(config)

    @property
    def table_name(self) -> str:
        return self.database.table_name

    def set(self, key: str, value: Any, ref: int | None = None) -> bool:
        """Insert or update the pair ``(key, ref)``; the record id survives updates."""
        return self.database.meta_repo.set_meta(key, value, ref=ref)

    def get(self, key: str, ref: int | None = None, want_epoch: bool = False) -> Any:
        """Return the stored value, or its write time when ``want_epoch`` is set; None if absent."""
        return self.database.meta_repo.get_meta(key, ref=ref, want_epoch=want_epoch)

    def get_record(self, key: str, ref: int | None = None) -> MetaRecord | None:
        return self.database.meta_repo.get_record(key, ref=ref)

    def remove(self, key: str, ref: int | None = None) -> bool:
        """Delete the pair; returns False when there was nothing to delete."""
        return self.database.meta_repo.remove_meta(key, ref=ref)

    def all(self, ref: int | None = None, pattern: str | None = None) -> dict[str, Any]:
        """
        Return every pair of ``ref`` as ``{key: value}``.

        ``pattern`` is a regular expression without delimiters, searched in
        each key case-insensitively.
        """
        return self.database.meta_repo.list_meta(ref=ref, pattern=pattern)

    def close(self) -> None:
        self.database.close()

    def __enter__(self) -> MetadataStore:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


__all__ = ["MetadataStore"]
