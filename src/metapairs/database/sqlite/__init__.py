"""SQLite backend for metapairs."""

from metapairs.database.sqlite.session import SQLiteSessionManager
from metapairs.database.sqlite.sqlite import SQLiteStore

__all__ = ["SQLiteSessionManager", "SQLiteStore"]
