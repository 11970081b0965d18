from pathlib import Path
from typing import Any


def sqlite_config(path: Path, **extra: Any) -> dict[str, Any]:
    return {"metadata_store": {"provider": "sqlite", "dsn": f"sqlite:///{path}", **extra}}
