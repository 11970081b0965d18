from metapairs.database.postgres.postgres import PostgresStore

__all__ = ["PostgresStore"]
