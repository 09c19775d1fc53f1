"""Stateless page/limit pagination over a filtered select.

Two normalization policies exist and each listing endpoint picks one:

- lenient: a missing, non-positive or over-ceiling value falls back to the
  default;
- strict: a negative ``limit``, a ``page`` below 1 or a ``limit`` above the
  ceiling is rejected with ``ValidationError``. ``limit = 0`` is accepted and
  yields an empty page with ``pages = 0``.
"""

import math
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from discuss_board.config import settings
from discuss_board.core.exceptions import ValidationError


@dataclass(frozen=True)
class PageWindow:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def take(self) -> int:
        return self.limit


def resolve_window(
    page: int | None,
    limit: int | None,
    *,
    strict: bool = False,
    ceiling: int | None = None,
    default_limit: int | None = None,
) -> PageWindow:
    default_limit = default_limit or settings.DEFAULT_PAGE_LIMIT

    if strict:
        if page is not None and page < 1:
            raise ValidationError("page must be a positive integer.")
        if limit is not None and limit < 0:
            raise ValidationError("limit must be a non-negative integer.")
        if limit is not None and ceiling is not None and limit > ceiling:
            raise ValidationError(f"limit must not exceed {ceiling}.")
        return PageWindow(
            page=page if page is not None else 1,
            limit=limit if limit is not None else default_limit,
        )

    resolved_page = page if page is not None and page > 0 else 1
    resolved_limit = limit if limit is not None and limit > 0 else default_limit
    if ceiling is not None and resolved_limit > ceiling:
        resolved_limit = default_limit
    return PageWindow(page=resolved_page, limit=resolved_limit)


def page_count(records: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return math.ceil(records / limit)


async def paginate(
    db: AsyncSession,
    query: Select,
    window: PageWindow,
) -> tuple[list[Any], int]:
    """Run the count and the page query over the identical predicate.

    Both statements execute on the same session, hence inside the same
    transaction. A window that starts past the last row never reaches the
    store, so an arbitrarily large ``page`` cannot overflow ``OFFSET``.
    """
    count_q = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_q)).scalar_one()

    if window.take == 0 or window.skip >= total:
        return [], total

    result = await db.execute(query.offset(window.skip).limit(window.take))
    return list(result.scalars().all()), total


def envelope(window: PageWindow, total: int, data: list) -> dict:
    """Build the ``{pagination, data}`` listing response."""
    return {
        "pagination": {
            "current": window.page,
            "limit": window.limit,
            "records": total,
            "pages": page_count(total, window.limit),
        },
        "data": data,
    }
