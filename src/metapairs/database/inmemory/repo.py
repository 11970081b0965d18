from __future__ import annotations

from metapairs.database.inmemory.repositories import InMemoryMetaRepository
from metapairs.database.inmemory.state import InMemoryState
from metapairs.database.interfaces import Database
from metapairs.database.repositories import MetaRepo


class InMemoryStore(Database):
    def __init__(self, *, table_name: str = "pairs", state: InMemoryState | None = None) -> None:
        self.table_name = table_name
        self.state = state or InMemoryState()
        self.meta_repo: MetaRepo = InMemoryMetaRepository(state=self.state)

    def close(self) -> None:
        return None


__all__ = ["InMemoryStore"]
