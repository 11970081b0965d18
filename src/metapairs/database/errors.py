"""Error taxonomy for the metadata store.

Not-found is never an error: lookups return ``None`` and listings return an
empty mapping.
"""

from __future__ import annotations


class MetaStoreError(Exception):
    """Base class for every error raised by metapairs."""


class SerializationError(MetaStoreError, TypeError):
    """A value cannot be converted to its stored text form."""


class DeserializationError(MetaStoreError, ValueError):
    """Stored text cannot be converted back to a value."""


class InvalidPattern(MetaStoreError, ValueError):
    """A key pattern is not a valid regular expression."""


class StorageError(MetaStoreError):
    """The storage engine failed to execute an operation."""


class StorageUnavailable(StorageError):
    """Connectivity, permission, lock timeout or missing table."""


class ConstraintViolation(StorageError):
    """A write was rejected by a uniqueness or foreign key constraint."""


class SchemaMismatch(StorageError):
    """The table does not exist or lacks required columns."""


__all__ = [
    "ConstraintViolation",
    "DeserializationError",
    "InvalidPattern",
    "MetaStoreError",
    "SchemaMismatch",
    "SerializationError",
    "StorageError",
    "StorageUnavailable",
]
