"""Post, post edit history, and tag endpoints."""

import uuid

from fastapi import APIRouter, status

from discuss_board.config import settings
from discuss_board.core.deps import (
    CurrentPrincipal,
    DbSession,
    MemberPrincipal,
    OptionalPrincipal,
    StaffPrincipal,
)
from discuss_board.core.pagination import envelope, resolve_window
from discuss_board.schemas.common import Page
from discuss_board.schemas.post import (
    PostCreate,
    PostEditHistoryListRequest,
    PostEditHistoryRead,
    PostListRequest,
    PostRead,
    PostSummary,
    PostUpdate,
    TagCreate,
    TagListRequest,
    TagRead,
)
from discuss_board.services.post import PostService, TagService

router = APIRouter(prefix="/posts", tags=["posts"])
tags_router = APIRouter(prefix="/tags", tags=["tags"])


@router.post("", response_model=PostRead, status_code=status.HTTP_201_CREATED)
async def create_post(data: PostCreate, db: DbSession, principal: MemberPrincipal):
    svc = PostService(db)
    return PostRead.model_validate(await svc.create_post(data, principal))


@router.patch("", response_model=Page[PostSummary])
async def list_posts(filters: PostListRequest, db: DbSession, principal: OptionalPrincipal):
    """Public listing. An over-ceiling limit falls back to the default."""
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = PostService(db)
    posts, total = await svc.list_posts(filters, window, principal)
    return envelope(window, total, [PostSummary.model_validate(p) for p in posts])


@router.get("/{post_id}", response_model=PostRead)
async def get_post(post_id: uuid.UUID, db: DbSession, principal: OptionalPrincipal):
    svc = PostService(db)
    return PostRead.model_validate(await svc.get_post(post_id, principal))


@router.put("/{post_id}", response_model=PostRead)
async def update_post(post_id: uuid.UUID, data: PostUpdate, db: DbSession, principal: CurrentPrincipal):
    svc = PostService(db)
    return PostRead.model_validate(await svc.update_post(post_id, data, principal))


@router.delete("/{post_id}", response_model=PostRead)
async def delete_post(post_id: uuid.UUID, db: DbSession, principal: CurrentPrincipal):
    svc = PostService(db)
    return PostRead.model_validate(await svc.delete_post(post_id, principal))


@router.patch("/{post_id}/edit-histories", response_model=Page[PostEditHistoryRead])
async def list_post_edit_histories(
    post_id: uuid.UUID, filters: PostEditHistoryListRequest, db: DbSession, principal: OptionalPrincipal
):
    """Public, like the post. Strict paging: page below 1 or limit out of range is a 400."""
    window = resolve_window(filters.page, filters.limit, strict=True, ceiling=settings.MAX_PAGE_LIMIT)
    svc = PostService(db)
    rows, total = await svc.list_edit_histories(post_id, filters, window, principal)
    return envelope(window, total, [PostEditHistoryRead.model_validate(h) for h in rows])


@router.get("/{post_id}/edit-histories/{history_id}", response_model=PostEditHistoryRead)
async def get_post_edit_history(
    post_id: uuid.UUID, history_id: uuid.UUID, db: DbSession, principal: OptionalPrincipal
):
    svc = PostService(db)
    return PostEditHistoryRead.model_validate(await svc.get_edit_history(post_id, history_id, principal))


# --- Tags ---

@tags_router.post("", response_model=TagRead, status_code=status.HTTP_201_CREATED)
async def create_tag(data: TagCreate, db: DbSession, principal: StaffPrincipal):
    svc = TagService(db)
    return TagRead.model_validate(await svc.create_tag(data, principal))


@tags_router.patch("", response_model=Page[TagRead])
async def list_tags(filters: TagListRequest, db: DbSession):
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = TagService(db)
    tags, total = await svc.list_tags(filters, window)
    return envelope(window, total, [TagRead.model_validate(t) for t in tags])


@tags_router.get("/{tag_id}", response_model=TagRead)
async def get_tag(tag_id: uuid.UUID, db: DbSession):
    svc = TagService(db)
    return TagRead.model_validate(await svc.get_tag(tag_id))
