"""Helpers for merging dictionaries and converting environment maps."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional


def convert_envs(env: Optional[Mapping[str, str]]) -> list[str]:
    """Turn an environment mapping into a list of ``KEY=value`` strings."""
    if not env:
        return []
    return [f"{key}={value}" for key, value in env.items()]


def _key_text(key: Any) -> str:
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)


def _mapify(value: Any) -> Optional[dict[str, Any]]:
    """Return a shallow copy of ``value`` with string keys if it is a mapping."""
    if isinstance(value, Mapping):
        return {_key_text(k): v for k, v in value.items()}
    return None


def merge_maps(*maps: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Merge mappings left to right into a new dictionary.

    Later values win; where both the existing and the new value are
    mappings they are merged recursively. Inputs are left untouched.
    """
    result: dict[str, Any] = {}
    for current in maps:
        if current is None:
            continue
        for key, value in current.items():
            value_map = _mapify(value)
            if value_map is not None and key in result:
                existing = _mapify(result[key])
                if existing is not None:
                    result[key] = merge_maps(existing, value_map)
                    continue
            result[key] = value_map if value_map is not None else value
    return result


def merge_string_maps(
    *maps: Optional[Mapping[str, str]],
) -> Optional[dict[str, str]]:
    """Merge string mappings left to right; ``None`` when nothing results."""
    result: dict[str, str] = {}
    for current in maps:
        if current:
            result.update(current)
    return result or None