from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from metapairs.database.models import MetaRecord


@runtime_checkable
class MetaRepo(Protocol):
    """Repository contract for (key, ref) pairs.

    Every backend must keep at most one record per ``(key, ref)``, with two
    absent refs counting as equal, even when ``set_meta`` races itself.
    """

    def set_meta(self, key: str, value: Any, *, ref: int | None = None) -> bool: ...

    def get_meta(self, key: str, *, ref: int | None = None, want_epoch: bool = False) -> Any: ...

    def get_record(self, key: str, *, ref: int | None = None) -> MetaRecord | None: ...

    def remove_meta(self, key: str, *, ref: int | None = None) -> bool: ...

    def list_meta(self, *, ref: int | None = None, pattern: str | None = None) -> dict[str, Any]: ...
