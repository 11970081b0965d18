from __future__ import annotations

import logging
from typing import Any

from metapairs.database.inmemory.state import InMemoryState
from metapairs.database.models import (
    MetaRecord,
    compile_key_pattern,
    normalize_ref,
    now_epoch,
    validate_key,
)
from metapairs.database.repositories.meta import MetaRepo
from metapairs.database.serialization import decode_value, encode_value

logger = logging.getLogger(__name__)


class InMemoryMetaRepository(MetaRepo):
    """Pairs kept in process memory.

    Values are stored in their serialized form so reads hand out fresh copies
    and unsupported values fail exactly as they would against a database.
    The state lock is the critical section that makes check-and-write atomic.
    """

    def __init__(self, *, state: InMemoryState) -> None:
        self._state = state

    def set_meta(self, key: str, value: Any, *, ref: int | None = None) -> bool:
        validate_key(key)
        group = (key, normalize_ref(ref))
        payload = encode_value(value)
        epoch = now_epoch()
        with self._state.lock:
            existing = self._state.records.get(group)
            if existing is None:
                record = MetaRecord(id=self._state.next_id(), ref=ref, key=key, value=payload, epoch=epoch)
            else:
                record = existing.model_copy(update={"value": payload, "epoch": epoch})
            self._state.records[group] = record
        logger.debug("Stored pair %r (ref=%s) in memory", key, ref)
        return True

    def get_record(self, key: str, *, ref: int | None = None) -> MetaRecord | None:
        validate_key(key)
        with self._state.lock:
            stored = self._state.records.get((key, normalize_ref(ref)))
        if stored is None:
            return None
        return stored.model_copy(update={"value": decode_value(stored.value)})

    def get_meta(self, key: str, *, ref: int | None = None, want_epoch: bool = False) -> Any:
        record = self.get_record(key, ref=ref)
        if record is None:
            return None
        return record.epoch if want_epoch else record.value

    def remove_meta(self, key: str, *, ref: int | None = None) -> bool:
        validate_key(key)
        with self._state.lock:
            removed = self._state.records.pop((key, normalize_ref(ref)), None)
        return removed is not None

    def list_meta(self, *, ref: int | None = None, pattern: str | None = None) -> dict[str, Any]:
        ref_key = normalize_ref(ref)
        matcher = compile_key_pattern(pattern)
        with self._state.lock:
            stored = [record for (_, group), record in self._state.records.items() if group == ref_key]
        stored.sort(key=lambda record: record.id)
        result: dict[str, Any] = {}
        for record in stored:
            if matcher is not None and matcher.search(record.key) is None:
                continue
            result[record.key] = decode_value(record.value)
        return result


__all__ = ["InMemoryMetaRepository"]
