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
from metapairs.database.interfaces import Database
from metapairs.database.models import NULL_REF_SENTINEL, MetaRecord
from metapairs.database.repositories import MetaRepo

__all__ = [
    "ConstraintViolation",
    "Database",
    "DeserializationError",
    "InvalidPattern",
    "MetaRecord",
    "MetaRepo",
    "MetaStoreError",
    "NULL_REF_SENTINEL",
    "SchemaMismatch",
    "SerializationError",
    "StorageError",
    "StorageUnavailable",
]
