"""Limit/offset window computation for transaction listings."""
from __future__ import annotations

from dataclasses import dataclass

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
DEFAULT_OFFSET = 0


@dataclass(frozen=True)
class Pagination:
    limit: int
    offset: int
    total: int
    has_more: bool


def clamp_limit(limit: int | None) -> int:
    """Return ``limit`` clamped into ``[1, MAX_LIMIT]``, defaulting when unset."""

    if limit is None:
        return DEFAULT_LIMIT
    return max(1, min(limit, MAX_LIMIT))


def normalize_offset(offset: int | None) -> int:
    if offset is None:
        return DEFAULT_OFFSET
    return max(0, offset)


def build_pagination(limit: int, offset: int, total: int) -> Pagination:
    return Pagination(limit=limit, offset=offset, total=total, has_more=offset + limit < total)


__all__ = [
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "DEFAULT_OFFSET",
    "Pagination",
    "clamp_limit",
    "normalize_offset",
    "build_pagination",
]
