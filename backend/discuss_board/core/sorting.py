"""Sort-key parsing against a declared enum of sortable fields.

Accepted forms: ``field``, ``-field``, ``field:asc`` and ``field:desc``.
Unknown fields fall back to the entity default; the raw client string is
never used to look up a column.
"""

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from sqlalchemy import UnaryExpression

E = TypeVar("E", bound=enum.Enum)


@dataclass(frozen=True)
class SortSpec:
    field: enum.Enum
    descending: bool

    def order_by(self, columns: Mapping[Any, Any], tiebreaker: Any) -> list[UnaryExpression]:
        column = columns[self.field]
        if self.descending:
            return [column.desc(), tiebreaker.desc()]
        return [column.asc(), tiebreaker.asc()]


def parse_sort(
    raw: str | None,
    fields: type[E],
    default: E,
    *,
    default_descending: bool = True,
) -> SortSpec:
    if not raw or not raw.strip():
        return SortSpec(default, default_descending)

    value = raw.strip()
    descending: bool | None = None
    if value.startswith("-"):
        value, descending = value[1:], True
    elif ":" in value:
        value, _, direction = value.partition(":")
        direction = direction.strip().lower()
        if direction in ("asc", "desc"):
            descending = direction == "desc"

    try:
        field = fields(value.strip())
    except ValueError:
        return SortSpec(default, default_descending)

    return SortSpec(field, default_descending if descending is None else descending)
