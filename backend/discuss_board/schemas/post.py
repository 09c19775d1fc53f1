"""Post, tag, post reaction, and post edit history schemas."""

import uuid

from pydantic import AliasChoices, BaseModel, Field

from discuss_board.models.enums import PostStatus, PrincipalRole, ReactionType
from discuss_board.schemas.common import IsoDateTime, ListRequest, UtcDateTime


# --- Tag ---

class TagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    description: str | None = None


class TagListRequest(ListRequest):
    name: str | None = None


class TagRead(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None
    created_at: IsoDateTime
    updated_at: IsoDateTime

    model_config = {"from_attributes": True}


class TagSummary(BaseModel):
    id: uuid.UUID
    name: str

    model_config = {"from_attributes": True}


# --- Post ---

class PostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    body: str = Field(min_length=1)
    tag_ids: list[uuid.UUID] = Field(default_factory=list)


class PostUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=300)
    body: str | None = Field(None, min_length=1)
    status: PostStatus | None = None
    tag_ids: list[uuid.UUID] | None = None


class PostListRequest(ListRequest):
    author_id: uuid.UUID | None = None
    status: PostStatus | None = None
    tag_id: uuid.UUID | None = None
    keyword: str | None = None
    created_from: UtcDateTime | None = None
    created_to: UtcDateTime | None = None
    sort_order: str | None = None


class PostSummary(BaseModel):
    id: uuid.UUID
    author_member_id: uuid.UUID
    title: str
    status: PostStatus
    is_locked: bool
    created_at: IsoDateTime
    updated_at: IsoDateTime

    model_config = {"from_attributes": True}


class PostRead(PostSummary):
    body: str
    tags: list[TagSummary]
    deleted_at: IsoDateTime | None


# --- Post edit history ---

class PostEditHistoryListRequest(ListRequest):
    editor_id: uuid.UUID | None = None
    edited_from: UtcDateTime | None = None
    edited_to: UtcDateTime | None = None


class PostEditHistoryRead(BaseModel):
    id: uuid.UUID
    post_id: uuid.UUID
    editor_id: uuid.UUID = Field(validation_alias=AliasChoices("editor_account_id", "editor_id"))
    editor_role: PrincipalRole
    previous_title: str
    previous_body: str
    edited_title: str
    edited_body: str
    created_at: IsoDateTime

    model_config = {"from_attributes": True}


# --- Post reaction ---

class PostReactionCreate(BaseModel):
    post_id: uuid.UUID
    reaction_type: ReactionType


class PostReactionUpdate(BaseModel):
    reaction_type: ReactionType | None = None


class PostReactionListRequest(ListRequest):
    post_id: uuid.UUID | None = None
    member_id: uuid.UUID | None = None
    reaction_type: ReactionType | None = None


class PostReactionRead(BaseModel):
    id: uuid.UUID
    member_id: uuid.UUID
    post_id: uuid.UUID
    reaction_type: ReactionType
    created_at: IsoDateTime
    updated_at: IsoDateTime
    deleted_at: IsoDateTime | None

    model_config = {"from_attributes": True}
