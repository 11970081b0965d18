from metapairs.database.inmemory.repo import InMemoryStore
from metapairs.database.inmemory.state import InMemoryState

__all__ = ["InMemoryState", "InMemoryStore"]
