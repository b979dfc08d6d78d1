"""Pagination math shared by repositories and response schemas."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool

    def as_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "pages": self.pages,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }


@dataclass
class Page(Generic[T]):
    data: list[T] = field(default_factory=list)
    pagination: Pagination | None = None


def clamp_page(page: int | None) -> int:
    if page is None:
        return DEFAULT_PAGE
    return max(DEFAULT_PAGE, page)


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    return min(MAX_LIMIT, max(1, limit))


def offset_for(page: int, limit: int) -> int:
    return (page - 1) * limit


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    """Compute page metadata; ``pages = ceil(total / limit)``."""
    if limit < 1:
        raise ValueError("limit must be at least 1")
    pages = math.ceil(total / limit) if total else 0
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        pages=pages,
        has_next=page < pages,
        has_prev=page > 1,
    )
