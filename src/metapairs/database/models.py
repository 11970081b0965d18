from __future__ import annotations

import re
from typing import Any

import pendulum
from pydantic import BaseModel, Field

from metapairs.database.errors import InvalidPattern

# Stands in for an absent ref wherever refs are compared or made unique.
NULL_REF_SENTINEL = -2147483648
KEY_MAX_LENGTH = 255


class MetaRecord(BaseModel):
    """One stored pair as seen by callers (``ref`` is ``None`` when ungrouped)."""

    id: int
    ref: int | None = None
    key: str
    value: Any = None
    epoch: int = Field(description="Seconds since the Unix epoch of the last write.")


def validate_key(key: str) -> str:
    if not isinstance(key, str):
        msg = f"Pair key must be a string, got {type(key).__name__}"
        raise ValueError(msg)
    if not key:
        msg = "Pair key must not be empty"
        raise ValueError(msg)
    if len(key) > KEY_MAX_LENGTH:
        msg = f"Pair key exceeds {KEY_MAX_LENGTH} characters"
        raise ValueError(msg)
    return key


def validate_ref(ref: int | None) -> int | None:
    if ref is None:
        return None
    if isinstance(ref, bool) or not isinstance(ref, int):
        msg = f"Pair ref must be an integer or None, got {type(ref).__name__}"
        raise ValueError(msg)
    if ref == NULL_REF_SENTINEL:
        msg = f"Pair ref {NULL_REF_SENTINEL} is reserved for absent refs"
        raise ValueError(msg)
    return ref


def normalize_ref(ref: int | None) -> int:
    """Map ``ref`` to the grouping key used for equality and uniqueness."""
    ref = validate_ref(ref)
    return NULL_REF_SENTINEL if ref is None else ref


def denormalize_ref(ref_key: int | None) -> int | None:
    if ref_key is None or ref_key == NULL_REF_SENTINEL:
        return None
    return int(ref_key)


def compile_key_pattern(pattern: str | None) -> re.Pattern[str] | None:
    if not pattern:
        return None
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        msg = f"Invalid key pattern {pattern!r}: {exc}"
        raise InvalidPattern(msg) from exc


def now_epoch() -> int:
    return pendulum.now("UTC").int_timestamp


__all__ = [
    "KEY_MAX_LENGTH",
    "MetaRecord",
    "NULL_REF_SENTINEL",
    "compile_key_pattern",
    "denormalize_ref",
    "normalize_ref",
    "now_epoch",
    "validate_key",
    "validate_ref",
]
