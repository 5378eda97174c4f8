"""Narrowing for the untyped JSON bodies the API sends back."""

from __future__ import annotations

from typing import Mapping, cast


def as_str_dict(obj: object) -> dict[str, object] | None:
    """Return obj as a JSON object, or None for anything else."""
    if not isinstance(obj, dict):
        return None
    d = cast(dict[object, object], obj)
    if any(not isinstance(k, str) for k in d):
        return None
    return cast(dict[str, object], d)


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Non-empty, stripped string at key, None otherwise."""
    value = table.get(key)
    if isinstance(value, str):
        return value.strip() or None
    return None


def get_list(table: Mapping[str, object], key: str) -> list[object] | None:
    value = table.get(key)
    return cast(list[object], value) if isinstance(value, list) else None
