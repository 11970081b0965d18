from metapairs.database.inmemory.repositories.meta_repo import InMemoryMetaRepository

__all__ = ["InMemoryMetaRepository"]
