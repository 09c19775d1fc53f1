"""Declarative filter builder.

Each listing endpoint declares a ``FilterSet``: a table that maps request
fields to SQL clauses. A field that the client did not send produces no
clause at all; a field sent as ``null`` only produces ``IS NULL`` when the
rule is declared nullable.
"""

import enum
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel
from sqlalchemy import ColumnElement, or_


def _escape_ilike(value: str) -> str:
    """Escape ILIKE metacharacters to prevent wildcard injection."""
    return (
        value
        .replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _field(request: BaseModel, name: str) -> tuple[bool, Any]:
    """Return (was_sent, value) for a request field."""
    if name not in request.model_fields_set:
        return False, None
    return True, getattr(request, name)


@dataclass(frozen=True)
class Equals:
    """``column = value``. Declared nullable rules turn an explicit null into ``IS NULL``."""

    field: str
    column: Any
    nullable: bool = False

    def clauses(self, request: BaseModel) -> list[ColumnElement]:
        sent, value = _field(request, self.field)
        if not sent:
            return []
        if value is None:
            return [self.column.is_(None)] if self.nullable else []
        return [self.column == value]


@dataclass(frozen=True)
class IsSet:
    """Boolean flag: true matches non-null rows, false matches null rows."""

    field: str
    column: Any

    def clauses(self, request: BaseModel) -> list[ColumnElement]:
        sent, value = _field(request, self.field)
        if not sent or value is None:
            return []
        return [self.column.is_not(None) if value else self.column.is_(None)]


@dataclass(frozen=True)
class Range:
    """Inclusive range over one column; either bound may be omitted."""

    lower: str
    upper: str
    column: Any

    def clauses(self, request: BaseModel) -> list[ColumnElement]:
        result = []
        _, low = _field(request, self.lower)
        _, high = _field(request, self.upper)
        if low is not None:
            result.append(self.column >= (as_utc(low) if isinstance(low, datetime) else low))
        if high is not None:
            result.append(self.column <= (as_utc(high) if isinstance(high, datetime) else high))
        return result


class Contains:
    """Case-insensitive substring match over one or more columns (OR-ed)."""

    def __init__(self, field: str, *columns: Any) -> None:
        self.field = field
        self.columns = columns

    def clauses(self, request: BaseModel) -> list[ColumnElement]:
        _, value = _field(request, self.field)
        if value is None or not str(value).strip():
            return []
        pattern = f"%{_escape_ilike(str(value).strip())}%"
        matches = [col.ilike(pattern, escape="\\") for col in self.columns]
        return [matches[0] if len(matches) == 1 else or_(*matches)]


class Where:
    """Escape hatch for clauses that need a subquery; called only when a value was sent."""

    def __init__(self, field: str, build: Callable[[Any], ColumnElement]) -> None:
        self.field = field
        self.build = build

    def clauses(self, request: BaseModel) -> list[ColumnElement]:
        _, value = _field(request, self.field)
        if value is None:
            return []
        return [self.build(value)]


class FilterSet:
    """An ordered collection of filter rules for one entity."""

    def __init__(self, *rules: Equals | IsSet | Range | Contains | Where) -> None:
        self.rules = rules

    def build(self, request: BaseModel) -> list[ColumnElement]:
        clauses: list[ColumnElement] = []
        for rule in self.rules:
            clauses.extend(rule.clauses(request))
        return clauses


# --- Soft-delete visibility ---

class Visibility(str, enum.Enum):
    """Audit flag for soft-deleted rows. Only privileged callers may change it."""

    EXCLUDE = "exclude"
    INCLUDE = "include"
    ONLY = "only"


def visibility_clause(model: Any, visibility: Visibility) -> ColumnElement | None:
    if visibility == Visibility.EXCLUDE:
        return model.deleted_at.is_(None)
    if visibility == Visibility.ONLY:
        return model.deleted_at.is_not(None)
    return None
