from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from ..core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT
    sort: str = ""

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Page:
    items: Sequence[Any]
    total: int
    page: int
    limit: int

    def pagination(self) -> dict:
        pages = math.ceil(self.total / self.limit) if self.limit else 0
        return {
            "current": self.page,
            "pages": pages,
            "total": self.total,
            "limit": self.limit,
            "hasNext": self.page < pages,
            "hasPrev": self.page > 1,
        }


def parse_page_request(args: Mapping[str, Any], *, default_limit: int = DEFAULT_PAGE_LIMIT, default_sort: str = "") -> PageRequest:
    """Read page/limit/sort from query args; limit is capped at MAX_PAGE_LIMIT."""

    try:
        page = int(args.get("page") or 1)
        limit = int(args.get("limit") or default_limit)
    except (TypeError, ValueError):
        raise ValidationError("page and limit must be integers")
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be positive")
    return PageRequest(page=page, limit=min(limit, MAX_PAGE_LIMIT), sort=str(args.get("sort") or default_sort))


def parse_sort(sort: str, allowed: Mapping[str, str]) -> list[tuple[str, bool]]:
    """Parse 'field,-other' into [(column, descending)].

    `allowed` maps API field names to column names; unknown fields are rejected
    so the result is safe to interpolate into ORDER BY.
    """

    out: list[tuple[str, bool]] = []
    for raw in (sort or "").split(","):
        field = raw.strip()
        if not field:
            continue
        descending = field.startswith("-")
        name = field[1:] if descending else field
        if name not in allowed:
            raise ValidationError(f"Cannot sort by {name!r}")
        out.append((allowed[name], descending))
    return out


def order_by_clause(sort: str, allowed: Mapping[str, str], *, default: str) -> str:
    fields = parse_sort(sort, allowed)
    if not fields:
        return default
    return ", ".join(f"{col} {'DESC' if desc else 'ASC'}" for col, desc in fields)
