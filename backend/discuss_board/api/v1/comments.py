"""Comment, edit history, and deletion log endpoints (nested under posts)."""

import uuid

from fastapi import APIRouter, Body, status

from discuss_board.config import settings
from discuss_board.core.deps import (
    CurrentPrincipal,
    DbSession,
    MemberPrincipal,
    OptionalPrincipal,
    StaffPrincipal,
)
from discuss_board.core.pagination import envelope, resolve_window
from discuss_board.schemas.comment import (
    CommentCreate,
    CommentDelete,
    CommentEditHistoryListRequest,
    CommentEditHistoryRead,
    CommentListRequest,
    CommentRead,
    CommentUpdate,
    DeletionLogListRequest,
    DeletionLogRead,
)
from discuss_board.schemas.common import Page
from discuss_board.services.comment import CommentService

router = APIRouter(prefix="/posts/{post_id}/comments", tags=["comments"])


@router.post("", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
async def create_comment(
    post_id: uuid.UUID, data: CommentCreate, db: DbSession, principal: MemberPrincipal
):
    svc = CommentService(db)
    return CommentRead.model_validate(await svc.create_comment(post_id, data, principal))


@router.patch("", response_model=Page[CommentRead])
async def list_comments(
    post_id: uuid.UUID, filters: CommentListRequest, db: DbSession, principal: OptionalPrincipal
):
    """Public listing; ``deleted`` widens to soft-deleted rows for moderators only."""
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = CommentService(db)
    comments, total = await svc.list_comments(post_id, filters, window, principal)
    return envelope(window, total, [CommentRead.model_validate(c) for c in comments])


@router.get("/{comment_id}", response_model=CommentRead)
async def get_comment(
    post_id: uuid.UUID, comment_id: uuid.UUID, db: DbSession, principal: OptionalPrincipal
):
    svc = CommentService(db)
    return CommentRead.model_validate(await svc.get_comment(post_id, comment_id, principal))


@router.put("/{comment_id}", response_model=CommentRead)
async def update_comment(
    post_id: uuid.UUID,
    comment_id: uuid.UUID,
    data: CommentUpdate,
    db: DbSession,
    principal: CurrentPrincipal,
):
    svc = CommentService(db)
    return CommentRead.model_validate(await svc.update_comment(post_id, comment_id, data, principal))


@router.delete("/{comment_id}", response_model=CommentRead)
async def delete_comment(
    post_id: uuid.UUID,
    comment_id: uuid.UUID,
    db: DbSession,
    principal: CurrentPrincipal,
    data: CommentDelete | None = Body(None),
):
    """Soft delete; records who deleted the comment and why."""
    svc = CommentService(db)
    comment = await svc.delete_comment(
        post_id, comment_id, principal, reason=data.reason if data else None
    )
    return CommentRead.model_validate(comment)


@router.patch("/{comment_id}/edit-histories", response_model=Page[CommentEditHistoryRead])
async def list_comment_edit_histories(
    post_id: uuid.UUID,
    comment_id: uuid.UUID,
    filters: CommentEditHistoryListRequest,
    db: DbSession,
    principal: CurrentPrincipal,
):
    """Comment author and moderators only."""
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = CommentService(db)
    rows, total = await svc.list_edit_histories(post_id, comment_id, filters, window, principal)
    return envelope(window, total, [CommentEditHistoryRead.model_validate(h) for h in rows])


@router.get("/{comment_id}/edit-histories/{history_id}", response_model=CommentEditHistoryRead)
async def get_comment_edit_history(
    post_id: uuid.UUID,
    comment_id: uuid.UUID,
    history_id: uuid.UUID,
    db: DbSession,
    principal: CurrentPrincipal,
):
    svc = CommentService(db)
    history = await svc.get_edit_history(post_id, comment_id, history_id, principal)
    return CommentEditHistoryRead.model_validate(history)


@router.patch("/{comment_id}/deletion-logs", response_model=Page[DeletionLogRead])
async def list_deletion_logs(
    post_id: uuid.UUID,
    comment_id: uuid.UUID,
    filters: DeletionLogListRequest,
    db: DbSession,
    principal: StaffPrincipal,
):
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = CommentService(db)
    logs, total = await svc.list_deletion_logs(post_id, comment_id, filters, window)
    return envelope(window, total, [DeletionLogRead.model_validate(log) for log in logs])
