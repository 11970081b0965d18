"""SQLAlchemy repository implementations shared by the SQL backends."""

from metapairs.database.sql.repositories.base import SQLRepoBase, translate_errors
from metapairs.database.sql.repositories.meta_repo import SQLMetaRepo, build_upsert

__all__ = ["SQLMetaRepo", "SQLRepoBase", "build_upsert", "translate_errors"]
