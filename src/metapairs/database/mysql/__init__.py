from metapairs.database.mysql.mysql import MySQLStore

__all__ = ["MySQLStore"]
