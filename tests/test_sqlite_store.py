import logging
from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import IntegrityError

from metapairs import (
    ConstraintViolation,
    DeserializationError,
    MetadataStore,
    SchemaMismatch,
    StorageUnavailable,
)
from metapairs.database.models import NULL_REF_SENTINEL
from metapairs.database.sql.predicates import pair_clause, ref_clause
from tests.helpers import sqlite_config


def _create_users(path: Path, ids: list[int]) -> None:
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)"))
        for user_id in ids:
            conn.execute(text("INSERT INTO users (id, name) VALUES (:id, :name)"), {"id": user_id, "name": f"u{user_id}"})
    engine.dispose()


def _linked_store(path: Path, on_delete: str) -> MetadataStore:
    return MetadataStore(
        database_config=sqlite_config(
            path,
            table_name="user_meta",
            parent={"table": "users", "constraint": "fk_user_meta_users", "on_delete": on_delete},
        )
    )


def test_engine_rejects_duplicate_absent_ref_rows(sqlite_store) -> None:
    insert = text("INSERT INTO pairs (key, value, epoch) VALUES ('dup', '1', 0)")
    with sqlite_store.database.engine.begin() as conn:
        conn.execute(insert)

    with pytest.raises(IntegrityError):
        with sqlite_store.database.engine.begin() as conn:
            conn.execute(insert)


def test_ref_key_column_holds_sentinel(sqlite_store) -> None:
    sqlite_store.set("a", 1)
    sqlite_store.set("a", 2, ref=9)

    with sqlite_store.database.engine.connect() as conn:
        rows = conn.execute(text("SELECT ref, ref_key FROM pairs ORDER BY id")).all()

    assert [tuple(row) for row in rows] == [(None, NULL_REF_SENTINEL), (9, 9)]


def test_epoch_has_server_default(sqlite_store) -> None:
    with sqlite_store.database.engine.begin() as conn:
        conn.execute(text("INSERT INTO pairs (key, value) VALUES ('raw', '\"x\"')"))

    assert sqlite_store.get("raw") == "x"
    assert sqlite_store.get("raw", want_epoch=True) > 0


def test_ids_are_never_reused(sqlite_store) -> None:
    sqlite_store.set("a", 1)
    first = sqlite_store.get_record("a")
    sqlite_store.remove("a")
    sqlite_store.set("b", 1)

    second = sqlite_store.get_record("b")
    assert first is not None and second is not None
    assert second.id > first.id


def test_corrupted_value_raises_deserialization_error(sqlite_store) -> None:
    sqlite_store.set("broken", {"ok": True}, ref=1)
    with sqlite_store.database.engine.begin() as conn:
        conn.execute(text("UPDATE pairs SET value = '{not json' WHERE key = 'broken'"))

    with pytest.raises(DeserializationError):
        sqlite_store.get("broken", ref=1)
    with pytest.raises(DeserializationError):
        sqlite_store.all(ref=1)
    assert sqlite_store.get("broken", ref=1, want_epoch=True) > 0


def test_pairs_survive_reopen(tmp_path: Path) -> None:
    config = sqlite_config(tmp_path / "pairs.db")
    with MetadataStore(database_config=config) as first:
        first.set("kept", [1, 2, 3], ref=5)

    with MetadataStore(database_config=config) as second:
        assert second.get("kept", ref=5) == [1, 2, 3]


def test_tables_are_separate_namespaces(tmp_path: Path) -> None:
    path = tmp_path / "pairs.db"
    with MetadataStore(database_config=sqlite_config(path, table_name="user_meta")) as users, MetadataStore(
        database_config=sqlite_config(path, table_name="post_meta")
    ) as posts:
        users.set("title", "user", ref=1)
        posts.set("title", "post", ref=1)

        assert users.get("title", ref=1) == "user"
        assert posts.get("title", ref=1) == "post"
        assert users.table_name == "user_meta"


def test_validate_mode_requires_existing_table(tmp_path: Path) -> None:
    path = tmp_path / "pairs.db"
    with pytest.raises(SchemaMismatch):
        MetadataStore(database_config=sqlite_config(path, ddl_mode="validate"))

    MetadataStore(database_config=sqlite_config(path)).close()
    with MetadataStore(database_config=sqlite_config(path, ddl_mode="validate")) as store:
        store.set("a", 1)
        assert store.get("a") == 1


def test_validate_mode_reports_missing_columns(tmp_path: Path) -> None:
    path = tmp_path / "pairs.db"
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE pairs (id INTEGER PRIMARY KEY, key TEXT, value TEXT)"))
    engine.dispose()

    with pytest.raises(SchemaMismatch, match="ref_key"):
        MetadataStore(database_config=sqlite_config(path, ddl_mode="validate"))


def test_dropped_table_surfaces_storage_unavailable(sqlite_store) -> None:
    with sqlite_store.database.engine.begin() as conn:
        conn.execute(text("DROP TABLE pairs"))

    with pytest.raises(StorageUnavailable):
        sqlite_store.get("a")
    with pytest.raises(StorageUnavailable):
        sqlite_store.set("a", 1)


def test_parent_delete_cascades(tmp_path: Path) -> None:
    path = tmp_path / "pairs.db"
    _create_users(path, [1, 2])

    with _linked_store(path, "CASCADE") as store:
        store.set("theme", "dark", ref=1)
        store.set("theme", "light", ref=2)
        with store.database.engine.begin() as conn:
            conn.execute(text("DELETE FROM users WHERE id = 1"))

        assert store.all(ref=1) == {}
        assert store.get("theme", ref=2) == "light"


def test_parent_delete_set_null_moves_pair_to_absent_group(tmp_path: Path) -> None:
    path = tmp_path / "pairs.db"
    _create_users(path, [2])

    with _linked_store(path, "set null") as store:
        store.set("theme", "dark", ref=2)
        with store.database.engine.begin() as conn:
            conn.execute(text("DELETE FROM users WHERE id = 2"))

        record = store.get_record("theme")
        assert record is not None
        assert record.ref is None
        assert record.value == "dark"


def test_parent_delete_restrict(tmp_path: Path) -> None:
    path = tmp_path / "pairs.db"
    _create_users(path, [3])

    with _linked_store(path, "restrict") as store:
        store.set("theme", "dark", ref=3)
        with pytest.raises(IntegrityError):
            with store.database.engine.begin() as conn:
                conn.execute(text("DELETE FROM users WHERE id = 3"))
        assert store.get("theme", ref=3) == "dark"


def test_missing_parent_raises_constraint_violation(tmp_path: Path) -> None:
    path = tmp_path / "pairs.db"
    _create_users(path, [1])

    with _linked_store(path, "cascade") as store:
        with pytest.raises(ConstraintViolation):
            store.set("theme", "dark", ref=99)
        assert store.get("theme", ref=99) is None
        store.set("theme", "ungrouped")
        assert store.get("theme") == "ungrouped"


def test_savepoint_upsert_updates_existing_row(sqlite_store) -> None:
    database = sqlite_store.database
    sqlite_store.set("mode", "a", ref=4)
    first = sqlite_store.get_record("mode", ref=4)
    assert first is not None
    row = {"ref": 4, "key": "mode", "value": '"b"', "epoch": first.epoch + 5}

    with database.sessions.session() as session, session.begin():
        database.meta_repo._upsert_with_savepoint(session, row)

    record = sqlite_store.get_record("mode", ref=4)
    assert record is not None
    assert record.id == first.id
    assert record.value == "b"
    assert record.epoch == first.epoch + 5


def test_grouping_predicates_compare_normalized_ref(sqlite_store) -> None:
    table = sqlite_store.database.table

    absent = str(ref_clause(table, None).compile(compile_kwargs={"literal_binds": True}))
    pair = str(pair_clause(table, "k", 7).compile(compile_kwargs={"literal_binds": True}))

    assert absent == f"pairs.ref_key = {NULL_REF_SENTINEL}"
    assert "pairs.ref_key = 7" in pair
    assert "pairs.key = 'k'" in pair


def test_validate_mode_requires_pair_uniqueness(tmp_path: Path) -> None:
    path = tmp_path / "pairs.db"
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TABLE pairs (id INTEGER PRIMARY KEY, ref INTEGER, key TEXT, value TEXT, "
                "epoch INTEGER, ref_key INTEGER)"
            )
        )
    engine.dispose()

    with pytest.raises(SchemaMismatch, match="unique"):
        MetadataStore(database_config=sqlite_config(path, ddl_mode="validate"))


def test_validate_mode_accepts_unique_index(tmp_path: Path) -> None:
    path = tmp_path / "pairs.db"
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as conn:
        conn.execute(
            text(
                "CREATE TABLE pairs (id INTEGER PRIMARY KEY, ref INTEGER, key TEXT, value TEXT, "
                "epoch INTEGER, ref_key INTEGER GENERATED ALWAYS AS (COALESCE(ref, -2147483648)) STORED)"
            )
        )
        conn.execute(text("CREATE UNIQUE INDEX ux_pairs_key_ref ON pairs (key, ref_key)"))
    engine.dispose()

    with MetadataStore(database_config=sqlite_config(path, ddl_mode="validate")) as store:
        store.set("a", 1)
        store.set("a", 2)
        assert store.get("a") == 2


def test_existing_sqlite_table_keeps_missing_parent_link(tmp_path: Path, caplog) -> None:
    path = tmp_path / "pairs.db"
    _create_users(path, [1])
    MetadataStore(database_config=sqlite_config(path, table_name="user_meta")).close()

    with caplog.at_level(logging.WARNING, logger="metapairs.database.sql.schema"):
        store = _linked_store(path, "cascade")

    with store:
        assert "without a parent foreign key" in caplog.text
        assert inspect(store.database.engine).get_foreign_keys("user_meta") == []
        store.set("theme", "dark", ref=99)
        assert store.get("theme", ref=99) == "dark"


def test_linked_table_reopens_without_warning(tmp_path: Path, caplog) -> None:
    path = tmp_path / "pairs.db"
    _create_users(path, [1])
    _linked_store(path, "cascade").close()

    with caplog.at_level(logging.WARNING, logger="metapairs.database.sql.schema"):
        store = _linked_store(path, "cascade")

    with store:
        assert "without a parent foreign key" not in caplog.text
        with pytest.raises(ConstraintViolation):
            store.set("theme", "dark", ref=99)


def test_reads_wait_for_running_writer(tmp_path: Path) -> None:
    with MetadataStore(database_config=sqlite_config(tmp_path / "pairs.db", busy_timeout=0.2)) as store:
        store.set("a", 1)
        with store.database.engine.connect() as writer, writer.begin():
            writer.execute(text("UPDATE pairs SET value = '2'"))
            with pytest.raises(StorageUnavailable):
                store.get("a")
        assert store.get("a") == 2
