"""JSON codec for pair values."""

from __future__ import annotations

import json
from typing import Any

from metapairs.database.errors import DeserializationError, SerializationError


def encode_value(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        # ValueError covers circular references.
        msg = f"Value of type {type(value).__name__} cannot be serialized: {exc}"
        raise SerializationError(msg) from exc


def decode_value(payload: str | None) -> Any:
    if payload is None:
        return None
    try:
        return json.loads(payload)
    except (TypeError, ValueError) as exc:
        msg = f"Stored value is not valid JSON: {str(payload)[:80]!r}"
        raise DeserializationError(msg) from exc


__all__ = ["decode_value", "encode_value"]
