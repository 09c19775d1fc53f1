"""Content report, moderation action, moderation log, appeal, and forbidden word schemas."""

import uuid

from pydantic import BaseModel, Field

from discuss_board.models.enums import (
    AppealStatus,
    ModerationActionStatus,
    ModerationActionType,
    ModerationLogEvent,
    ModerationTarget,
    ReportContentType,
    ReportStatus,
)
from discuss_board.schemas.common import IsoDateTime, ListRequest, UtcDateTime


# --- Content report ---

class ReportCreate(BaseModel):
    content_type: ReportContentType
    content_post_id: uuid.UUID | None = None
    content_comment_id: uuid.UUID | None = None
    reason: str = Field(min_length=1, max_length=2000)


class ReportUpdate(BaseModel):
    status: ReportStatus | None = None
    moderation_action_id: uuid.UUID | None = None


class ReportListRequest(ListRequest):
    status: ReportStatus | None = None
    content_type: ReportContentType | None = None
    reporter_member_id: uuid.UUID | None = None
    search: str | None = None
    created_from: UtcDateTime | None = None
    created_to: UtcDateTime | None = None


class ReportRead(BaseModel):
    id: uuid.UUID
    reporter_member_id: uuid.UUID
    content_type: ReportContentType
    content_post_id: uuid.UUID | None
    content_comment_id: uuid.UUID | None
    reason: str
    status: ReportStatus
    moderation_action_id: uuid.UUID | None
    reviewed_at: IsoDateTime | None
    created_at: IsoDateTime
    updated_at: IsoDateTime
    deleted_at: IsoDateTime | None

    model_config = {"from_attributes": True}


# --- Moderation action ---

class ModerationActionCreate(BaseModel):
    content_type: ModerationTarget
    target_member_id: uuid.UUID | None = None
    target_post_id: uuid.UUID | None = None
    target_comment_id: uuid.UUID | None = None
    action_type: ModerationActionType
    action_reason: str = Field(min_length=1, max_length=2000)
    details: str | None = None
    effective_from: UtcDateTime | None = None
    effective_until: UtcDateTime | None = None


class ModerationActionUpdate(BaseModel):
    action_reason: str | None = Field(None, min_length=1, max_length=2000)
    details: str | None = None
    effective_until: UtcDateTime | None = None
    status: ModerationActionStatus | None = None


class ModerationActionListRequest(ListRequest):
    moderator_account_id: uuid.UUID | None = None
    target_member_id: uuid.UUID | None = None
    target_post_id: uuid.UUID | None = None
    target_comment_id: uuid.UUID | None = None
    action_type: ModerationActionType | None = None
    status: ModerationActionStatus | None = None
    created_at_from: UtcDateTime | None = None
    created_at_to: UtcDateTime | None = None


class ModerationActionRead(BaseModel):
    id: uuid.UUID
    moderator_account_id: uuid.UUID
    content_type: ModerationTarget
    target_member_id: uuid.UUID | None
    target_post_id: uuid.UUID | None
    target_comment_id: uuid.UUID | None
    action_type: ModerationActionType
    action_reason: str
    details: str | None
    status: ModerationActionStatus
    effective_from: IsoDateTime
    effective_until: IsoDateTime | None
    revoked_at: IsoDateTime | None
    created_at: IsoDateTime
    updated_at: IsoDateTime
    deleted_at: IsoDateTime | None

    model_config = {"from_attributes": True}


# --- Moderation log ---

class ModerationLogCreate(BaseModel):
    event_type: ModerationLogEvent
    event_details: str | None = Field(None, max_length=5000)


class ModerationLogUpdate(BaseModel):
    event_type: ModerationLogEvent | None = None
    event_details: str | None = Field(None, max_length=5000)


class ModerationLogListRequest(ListRequest):
    event_type: ModerationLogEvent | None = None
    actor_account_id: uuid.UUID | None = None
    keyword: str | None = None
    created_from: UtcDateTime | None = None
    created_to: UtcDateTime | None = None


class ModerationLogRead(BaseModel):
    id: uuid.UUID
    moderation_action_id: uuid.UUID
    actor_account_id: uuid.UUID
    event_type: ModerationLogEvent
    event_details: str | None
    created_at: IsoDateTime
    updated_at: IsoDateTime

    model_config = {"from_attributes": True}


# --- Appeal ---

class AppealCreate(BaseModel):
    moderation_action_id: uuid.UUID
    appeal_rationale: str = Field(min_length=1, max_length=5000)


class AppealUpdate(BaseModel):
    appeal_rationale: str | None = Field(None, min_length=1, max_length=5000)
    status: AppealStatus | None = None
    resolution_notes: str | None = None


class AppealListRequest(ListRequest):
    status: AppealStatus | None = None
    moderation_action_id: uuid.UUID | None = None
    appellant_member_id: uuid.UUID | None = None


class AppealRead(BaseModel):
    id: uuid.UUID
    moderation_action_id: uuid.UUID
    appellant_member_id: uuid.UUID
    appeal_rationale: str
    status: AppealStatus
    resolution_notes: str | None
    resolved_at: IsoDateTime | None
    resolved_by_account_id: uuid.UUID | None
    created_at: IsoDateTime
    updated_at: IsoDateTime
    deleted_at: IsoDateTime | None

    model_config = {"from_attributes": True}


# --- Forbidden word ---

class ForbiddenWordCreate(BaseModel):
    expression: str = Field(min_length=1, max_length=100)
    description: str | None = None


class ForbiddenWordUpdate(BaseModel):
    expression: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None


class ForbiddenWordListRequest(ListRequest):
    keyword: str | None = None


class ForbiddenWordRead(BaseModel):
    id: uuid.UUID
    expression: str
    description: str | None
    created_at: IsoDateTime
    updated_at: IsoDateTime

    model_config = {"from_attributes": True}
