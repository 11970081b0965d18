import logging
import os
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, BeforeValidator, Field, model_validator

from metapairs.database.sql.schema import validate_identifier

logger = logging.getLogger(__name__)

METAPAIRS_PROVIDER_ENV = "METAPAIRS_PROVIDER"
METAPAIRS_DSN_ENV = "METAPAIRS_DSN"
METAPAIRS_TABLE_ENV = "METAPAIRS_TABLE"
METAPAIRS_DDL_MODE_ENV = "METAPAIRS_DDL_MODE"


def normalize_value(v: str) -> str:
    if isinstance(v, str):
        return v.strip().lower()
    return v


Normalize = BeforeValidator(normalize_value)
Identifier = Annotated[str, AfterValidator(validate_identifier)]


class ParentLinkConfig(BaseModel):
    """Foreign key from the ``ref`` column to the owning table's key."""

    table: Identifier
    column: Identifier = "id"
    constraint: Identifier | None = Field(default=None, description="Name of the foreign key constraint.")
    on_delete: Annotated[Literal["cascade", "restrict", "set null"], Normalize] = "cascade"


class MetadataStoreConfig(BaseModel):
    provider: Annotated[Literal["inmemory", "sqlite", "postgres", "mysql"], Normalize] = "inmemory"
    ddl_mode: Annotated[Literal["create", "validate"], Normalize] = "create"
    dsn: str | None = Field(default=None, description="SQLAlchemy URL (required for sqlite/postgres/mysql).")
    table_name: Identifier = Field(default="pairs", description="Table holding this namespace's pairs.")
    parent: ParentLinkConfig | None = None
    busy_timeout: float = Field(default=30.0, gt=0, description="SQLite lock wait in seconds.")
    echo: bool = False

    @model_validator(mode="after")
    def require_dsn(self) -> "MetadataStoreConfig":
        if self.provider != "inmemory" and not self.dsn:
            msg = f"metadata_store.dsn is required for provider={self.provider}"
            raise ValueError(msg)
        return self


class DatabaseConfig(BaseModel):
    metadata_store: MetadataStoreConfig = Field(default_factory=MetadataStoreConfig)


def load_database_config_from_env() -> DatabaseConfig | None:
    """Build a DatabaseConfig from ``METAPAIRS_*`` variables, or None when none is set."""
    overrides: dict[str, Any] = {}
    for env_name, field_name in (
        (METAPAIRS_PROVIDER_ENV, "provider"),
        (METAPAIRS_DSN_ENV, "dsn"),
        (METAPAIRS_TABLE_ENV, "table_name"),
        (METAPAIRS_DDL_MODE_ENV, "ddl_mode"),
    ):
        value = os.getenv(env_name)
        if value:
            overrides[field_name] = value
    if not overrides:
        return None
    if "provider" not in overrides and "dsn" in overrides:
        overrides["provider"] = _provider_from_dsn(overrides["dsn"])
    logger.debug("Loaded metadata store config from environment: %s", sorted(overrides))
    return DatabaseConfig(metadata_store=MetadataStoreConfig(**overrides))


def _provider_from_dsn(dsn: str) -> str:
    scheme = dsn.split(":", 1)[0].split("+", 1)[0].lower()
    if scheme == "postgresql":
        return "postgres"
    if scheme == "mariadb":
        return "mysql"
    return scheme
