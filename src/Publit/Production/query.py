"""Query-parameter builders for GET requests against the production API."""

from __future__ import annotations

from typing import Any, Mapping

QUERY_KEY_AUX = "aux"
QUERY_KEY_WITH = "with"
QUERY_KEY_SCOPE = "scope"
QUERY_KEY_LIMIT = "limit"
QUERY_KEY_OFFSET = "offset"

#: ``aux`` value asking for a time-limited download URL on files
PRESIGNED_URL = "presigned_url"


def aux(value: str) -> dict[str, Any]:
    """Ask the API for an auxiliary attribute (e.g. ``presigned_url``)."""
    return {QUERY_KEY_AUX: value}


def with_relations(*relations: str) -> dict[str, Any]:
    """Load related resources, e.g. ``with_relations("print_order_statuses")``."""
    return {QUERY_KEY_WITH: ",".join(relations)}


def scope(*scopes: str) -> dict[str, Any]:
    return {QUERY_KEY_SCOPE: ",".join(scopes)}


def limit(count: int, offset: int = 0) -> dict[str, Any]:
    if count < 1 or offset < 0:
        raise ValueError("limit requires count >= 1 and offset >= 0")
    return {QUERY_KEY_LIMIT: count, QUERY_KEY_OFFSET: offset}


def merge(*parts: Mapping[str, Any] | None) -> dict[str, Any]:
    """Combine query parts; later parts win on key clashes."""
    params: dict[str, Any] = {}
    for part in parts:
        if part:
            params.update(part)
    return params
