from metapairs.app import DatabaseConfig, MetadataStore, MetadataStoreConfig, ParentLinkConfig
from metapairs.database.errors import (
    ConstraintViolation,
    DeserializationError,
    InvalidPattern,
    MetaStoreError,
    SchemaMismatch,
    SerializationError,
    StorageError,
    StorageUnavailable,
)
from metapairs.database.models import MetaRecord

__all__ = [
    "ConstraintViolation",
    "DatabaseConfig",
    "DeserializationError",
    "InvalidPattern",
    "MetaRecord",
    "MetaStoreError",
    "MetadataStore",
    "MetadataStoreConfig",
    "ParentLinkConfig",
    "SchemaMismatch",
    "SerializationError",
    "StorageError",
    "StorageUnavailable",
]
