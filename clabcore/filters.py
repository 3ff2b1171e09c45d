"""Container filters and bind mounts in the form a podman service expects."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Optional

from clabcore.types import GenericFilter

logger = logging.getLogger(__name__)


class InvalidBindError(ValueError):
    """Raised when a bind mount string has no destination part."""


def podman_filter_map(filters: Optional[Iterable[GenericFilter]]) -> dict[str, list[str]]:
    """Group filters by type as ``field=value`` strings.

    ``exists`` filters become ``field=`` and filters with any operator other
    than ``=`` are skipped with a warning.
    """
    result: dict[str, list[str]] = {}
    for gen_filter in filters or ():
        operator = gen_filter.operator
        value = gen_filter.match
        if operator == "exists":
            operator = "="
            value = ""
        if operator != "=":
            logger.warning("received a filter with unsupported match type: %r", gen_filter)
            continue
        filter_str = gen_filter.field + operator + value
        logger.debug("produced a filter string %r from %r", filter_str, gen_filter)
        result.setdefault(gen_filter.filter_type, []).append(filter_str)
    return result


def convert_mounts(mounts: Optional[Iterable[str]]) -> list[dict[str, Any]]:
    """Turn ``src:dest[:opt1,opt2]`` bind strings into bind mount specs.

    Each spec is a dict with ``source``, ``destination``, ``type`` (always
    ``bind``) and ``options`` (empty when none were given).
    """
    specs: list[dict[str, Any]] = []
    for mount in mounts or ():
        parts = mount.split(":", 2)
        if len(parts) == 1:
            raise InvalidBindError(f"invalid bind mount provided: {mount}")
        specs.append(
            {
                "source": parts[0],
                "destination": parts[1],
                "type": "bind",
                "options": parts[2].split(",") if len(parts) == 3 else [],
            }
        )
    logger.debug("converted mounts %r into %r", mounts, specs)
    return specs