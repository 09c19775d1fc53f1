"""Helpers for the write path shared by every service.

Each write runs in the same order: resolve the target row (``NotFoundError``
when absent or soft-deleted), apply the guard, merge only the supplied
fields, stamp ``updated_at``, flush.
"""

import enum
import uuid
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from discuss_board.core.exceptions import NotFoundError
from discuss_board.models.base import utcnow

M = TypeVar("M")


async def fetch_active(
    db: AsyncSession,
    model: type[M],
    row_id: uuid.UUID,
    *,
    label: str | None = None,
) -> M:
    """Load a non-deleted row by id or raise ``NotFoundError``."""
    result = await db.execute(
        select(model).where(
            model.id == row_id,  # type: ignore[attr-defined]
            model.deleted_at.is_(None),  # type: ignore[attr-defined]
        )
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise NotFoundError(f"{label or model.__name__} not found.")
    return row


def jsonable(value: Any) -> Any:
    """Render a column value for the audit log's JSON columns."""
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def snapshot(row: Any, *fields: str) -> dict:
    return {field: jsonable(getattr(row, field)) for field in fields}


def merge_fields(row: Any, changes: dict[str, Any]) -> tuple[dict, dict]:
    """Apply supplied fields only. Returns (old_values, new_values) of what changed.

    ``updated_at`` is refreshed even when no value differs.
    """
    old_values: dict = {}
    new_values: dict = {}
    for field, value in changes.items():
        current = getattr(row, field)
        if current != value:
            old_values[field] = jsonable(current)
            new_values[field] = jsonable(value)
            setattr(row, field, value)
    row.updated_at = utcnow()
    return old_values, new_values


def soft_delete(row: Any) -> None:
    now = utcnow()
    row.deleted_at = now
    row.updated_at = now


def supplied_fields(data: BaseModel, *non_nullable: str) -> dict[str, Any]:
    """Fields the client actually sent. An explicit null on a column that
    cannot be null means "leave unchanged"."""
    changes = data.model_dump(exclude_unset=True)
    for field in non_nullable:
        if field in changes and changes[field] is None:
            del changes[field]
    return changes
