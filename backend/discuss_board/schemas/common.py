"""Shared schema utilities: date normalization, list requests, pagination envelope."""

from datetime import datetime
from typing import Annotated, Generic, TypeVar

from pydantic import AfterValidator, BaseModel, PlainSerializer

from discuss_board.core.filtering import Visibility, as_utc

T = TypeVar("T")


def to_iso_z(value: datetime) -> str:
    """ISO-8601 in UTC with a trailing ``Z``, e.g. ``2026-01-31T12:00:00.000Z``."""
    return as_utc(value).replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


# Output: every timestamp leaves the API in one format regardless of the driver
IsoDateTime = Annotated[datetime, PlainSerializer(to_iso_z, return_type=str)]

# Input: offsets are accepted and normalized to UTC before they reach the store
UtcDateTime = Annotated[datetime, AfterValidator(as_utc)]


class ListRequest(BaseModel):
    """Base body for ``PATCH <collection>`` listings. Unknown keys are ignored."""

    page: int | None = None
    limit: int | None = None
    sort: str | None = None

    model_config = {"extra": "ignore"}


class AuditListRequest(ListRequest):
    """Listing that moderators and administrators may widen to soft-deleted rows."""

    deleted: Visibility | None = None


class Pagination(BaseModel):
    current: int
    limit: int
    records: int
    pages: int


class Page(BaseModel, Generic[T]):
    pagination: Pagination
    data: list[T]
