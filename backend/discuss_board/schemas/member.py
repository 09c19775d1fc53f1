"""Member profile schemas."""

import uuid

from pydantic import BaseModel, Field

from discuss_board.models.enums import MemberStatus
from discuss_board.schemas.common import IsoDateTime, ListRequest, UtcDateTime


class MemberUpdate(BaseModel):
    display_name: str | None = Field(None, min_length=1, max_length=50)
    bio: str | None = Field(None, max_length=2000)


class MemberListRequest(ListRequest):
    display_name: str | None = None
    status: MemberStatus | None = None
    created_from: UtcDateTime | None = None
    created_to: UtcDateTime | None = None


class MemberSummary(BaseModel):
    id: uuid.UUID
    display_name: str
    status: MemberStatus
    created_at: IsoDateTime

    model_config = {"from_attributes": True}


class MemberRead(MemberSummary):
    user_account_id: uuid.UUID
    bio: str | None
    updated_at: IsoDateTime
    deleted_at: IsoDateTime | None
