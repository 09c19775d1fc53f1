"""Comment, edit history, deletion log, reaction, and attachment schemas."""

import uuid

from pydantic import AliasChoices, BaseModel, Field

from discuss_board.models.enums import PrincipalRole, ReactionType
from discuss_board.schemas.common import AuditListRequest, IsoDateTime, ListRequest, UtcDateTime


# --- Comment ---

class CommentCreate(BaseModel):
    body: str = Field(min_length=1, max_length=10000)
    parent_id: uuid.UUID | None = None


class CommentUpdate(BaseModel):
    body: str | None = Field(None, min_length=1, max_length=10000)
    is_locked: bool | None = None


class CommentDelete(BaseModel):
    reason: str | None = Field(None, max_length=1000)


class CommentListRequest(AuditListRequest):
    author_id: uuid.UUID | None = None
    keyword: str | None = None
    created_from: UtcDateTime | None = None
    created_to: UtcDateTime | None = None


class CommentRead(BaseModel):
    id: uuid.UUID
    post_id: uuid.UUID
    author_member_id: uuid.UUID
    parent_id: uuid.UUID | None
    body: str
    is_locked: bool
    created_at: IsoDateTime
    updated_at: IsoDateTime
    deleted_at: IsoDateTime | None

    model_config = {"from_attributes": True}


class CommentEditHistoryListRequest(ListRequest):
    editor_id: uuid.UUID | None = None
    edited_from: UtcDateTime | None = None
    edited_to: UtcDateTime | None = None


class CommentEditHistoryRead(BaseModel):
    id: uuid.UUID
    comment_id: uuid.UUID
    post_id: uuid.UUID
    editor_id: uuid.UUID = Field(validation_alias=AliasChoices("editor_account_id", "editor_id"))
    editor_role: PrincipalRole
    previous_content: str
    edited_content: str
    created_at: IsoDateTime

    model_config = {"from_attributes": True}


class DeletionLogListRequest(ListRequest):
    actor_role: PrincipalRole | None = None
    created_from: UtcDateTime | None = None
    created_to: UtcDateTime | None = None


class DeletionLogRead(BaseModel):
    id: uuid.UUID
    comment_id: uuid.UUID
    post_id: uuid.UUID
    deleted_by_account_id: uuid.UUID
    actor_role: PrincipalRole
    reason: str | None
    created_at: IsoDateTime

    model_config = {"from_attributes": True}


# --- Reaction ---

class ReactionCreate(BaseModel):
    comment_id: uuid.UUID
    reaction_type: ReactionType


class ReactionUpdate(BaseModel):
    reaction_type: ReactionType | None = None


class ReactionListRequest(ListRequest):
    comment_id: uuid.UUID | None = None
    member_id: uuid.UUID | None = None
    reaction_type: ReactionType | None = None


class ReactionRead(BaseModel):
    id: uuid.UUID
    member_id: uuid.UUID
    comment_id: uuid.UUID
    reaction_type: ReactionType
    created_at: IsoDateTime
    updated_at: IsoDateTime
    deleted_at: IsoDateTime | None

    model_config = {"from_attributes": True}


# --- Attachment ---

class AttachmentCreate(BaseModel):
    file_name: str = Field(min_length=1, max_length=255)
    file_url: str = Field(min_length=1, max_length=1024)
    content_type: str = Field(min_length=1, max_length=100)
    size_bytes: int = Field(ge=0)


class AttachmentListRequest(AuditListRequest):
    file_name: str | None = None
    content_type: str | None = None
    uploaded_by_member_id: uuid.UUID | None = None


class AttachmentRead(BaseModel):
    id: uuid.UUID
    post_id: uuid.UUID | None
    comment_id: uuid.UUID | None
    uploaded_by_member_id: uuid.UUID
    file_name: str
    file_url: str
    content_type: str
    size_bytes: int
    created_at: IsoDateTime
    updated_at: IsoDateTime
    deleted_at: IsoDateTime | None

    model_config = {"from_attributes": True}
