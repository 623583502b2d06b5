"""Offset pagination over a repository.

page is 1-based; limit is the page size. pages = ceil(total / limit), so
the last page holds the remainder (or a full page when total divides
evenly). Asking past the last page yields an empty items list.
"""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from taskflow.db.repository import SqlRepository
from taskflow.errors import ValidationError

T = TypeVar("T")

# id breaks ties so page boundaries are stable.
NEWEST_FIRST = ("-created_at", "-id")


@dataclass
class Page(Generic[T]):
    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit)

    def meta(self) -> dict[str, int]:
        return {
            "count": len(self.items),
            "total": self.total,
            "page": self.page,
            "pages": self.pages,
        }


async def paginate(
    repo: SqlRepository,
    filters: Optional[Mapping[str, Any]],
    page: int,
    limit: int,
    sort: Sequence[str] = NEWEST_FIRST,
) -> Page:
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be positive integers")
    items, total = await repo.find(
        filters, sort=sort, skip=(page - 1) * limit, limit=limit
    )
    return Page(items=items, total=total, page=page, limit=limit)
