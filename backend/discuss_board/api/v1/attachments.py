"""Attachment endpoints: nested create/list, uploader delete, admin purge."""

import uuid

from fastapi import APIRouter, Response, status

from discuss_board.config import settings
from discuss_board.core.deps import (
    AdminPrincipal,
    CurrentPrincipal,
    DbSession,
    MemberPrincipal,
)
from discuss_board.core.pagination import envelope, resolve_window
from discuss_board.schemas.comment import AttachmentCreate, AttachmentListRequest, AttachmentRead
from discuss_board.schemas.common import Page
from discuss_board.services.attachment import AttachmentService

router = APIRouter(tags=["attachments"])


@router.post(
    "/posts/{post_id}/attachments",
    response_model=AttachmentRead,
    status_code=status.HTTP_201_CREATED,
)
async def attach_to_post(
    post_id: uuid.UUID, data: AttachmentCreate, db: DbSession, principal: MemberPrincipal
):
    svc = AttachmentService(db)
    return AttachmentRead.model_validate(await svc.attach_to_post(post_id, data, principal))


@router.patch("/posts/{post_id}/attachments", response_model=Page[AttachmentRead])
async def list_post_attachments(
    post_id: uuid.UUID, filters: AttachmentListRequest, db: DbSession, principal: CurrentPrincipal
):
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = AttachmentService(db)
    rows, total = await svc.list_for_post(post_id, filters, window, principal)
    return envelope(window, total, [AttachmentRead.model_validate(a) for a in rows])


@router.post(
    "/posts/{post_id}/comments/{comment_id}/attachments",
    response_model=AttachmentRead,
    status_code=status.HTTP_201_CREATED,
)
async def attach_to_comment(
    post_id: uuid.UUID,
    comment_id: uuid.UUID,
    data: AttachmentCreate,
    db: DbSession,
    principal: MemberPrincipal,
):
    svc = AttachmentService(db)
    return AttachmentRead.model_validate(
        await svc.attach_to_comment(post_id, comment_id, data, principal)
    )


@router.patch("/posts/{post_id}/comments/{comment_id}/attachments", response_model=Page[AttachmentRead])
async def list_comment_attachments(
    post_id: uuid.UUID,
    comment_id: uuid.UUID,
    filters: AttachmentListRequest,
    db: DbSession,
    principal: CurrentPrincipal,
):
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = AttachmentService(db)
    rows, total = await svc.list_for_comment(post_id, comment_id, filters, window, principal)
    return envelope(window, total, [AttachmentRead.model_validate(a) for a in rows])


@router.delete("/attachments/{attachment_id}", response_model=AttachmentRead)
async def delete_attachment(attachment_id: uuid.UUID, db: DbSession, principal: CurrentPrincipal):
    svc = AttachmentService(db)
    return AttachmentRead.model_validate(await svc.delete_attachment(attachment_id, principal))


@router.delete("/admin/attachments/{attachment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def purge_attachment(attachment_id: uuid.UUID, db: DbSession, principal: AdminPrincipal):
    """Hard delete. Purging an already-purged attachment is a 404."""
    svc = AttachmentService(db)
    await svc.purge_attachment(attachment_id, principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
