from __future__ import annotations

import threading
from dataclasses import dataclass, field

from metapairs.database.models import MetaRecord


@dataclass
class InMemoryState:
    # Keyed by (key, normalized ref); see metapairs.database.models.normalize_ref.
    records: dict[tuple[str, int], MetaRecord] = field(default_factory=dict)
    last_id: int = 0
    lock: threading.RLock = field(default_factory=threading.RLock)

    def next_id(self) -> int:
        self.last_id += 1
        return self.last_id


__all__ = ["InMemoryState"]
