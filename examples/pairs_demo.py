import tempfile
from pathlib import Path

from metapairs import MetadataStore


def main() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        dsn = f"sqlite:///{Path(tmp) / 'pairs.db'}"
        config = {"metadata_store": {"provider": "sqlite", "dsn": dsn}}

        with MetadataStore(table="user_meta", database_config=config) as store:
            store.set("theme", "dark", ref=42)
            store.set("font", "mono", ref=42)
            store.set("theme", "light")  # site-wide default, no owner

            print("user 42 theme:", store.get("theme", ref=42))
            print("default theme:", store.get("theme"))
            print("written at:", store.get("theme", ref=42, want_epoch=True))
            print("user 42 t*:", store.all(ref=42, pattern="^t"))

            store.remove("font", ref=42)
            print("after remove:", store.all(ref=42))


if __name__ == "__main__":
    main()
