from metapairs.database.sql.predicates import pair_clause, ref_clause
from metapairs.database.sql.schema import ParentLink, build_pairs_table, ensure_table
from metapairs.database.sql.session import SessionManager
from metapairs.database.sql.store import SQLStore

__all__ = [
    "ParentLink",
    "SQLStore",
    "SessionManager",
    "build_pairs_table",
    "ensure_table",
    "pair_clause",
    "ref_clause",
]
