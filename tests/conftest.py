from pathlib import Path
from typing import Any

import pytest

from metapairs import MetadataStore
from tests.helpers import sqlite_config

_ENV_VARS = ("METAPAIRS_PROVIDER", "METAPAIRS_DSN", "METAPAIRS_TABLE", "METAPAIRS_DDL_MODE")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(params=["inmemory", "sqlite"])
def store(request, tmp_path: Path):
    if request.param == "inmemory":
        config: dict[str, Any] = {"metadata_store": {"provider": "inmemory"}}
    else:
        config = sqlite_config(tmp_path / "pairs.db")
    with MetadataStore(database_config=config) as built:
        yield built


@pytest.fixture
def sqlite_store(tmp_path: Path):
    with MetadataStore(database_config=sqlite_config(tmp_path / "pairs.db")) as built:
        yield built
