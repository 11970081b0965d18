from __future__ import annotations

from typing import Protocol, runtime_checkable

from metapairs.database.models import MetaRecord
from metapairs.database.repositories import MetaRepo


@runtime_checkable
class Database(Protocol):
    """Backend-agnostic database contract."""

    table_name: str
    meta_repo: MetaRepo

    def close(self) -> None: ...


__all__ = ["Database", "MetaRecord"]
