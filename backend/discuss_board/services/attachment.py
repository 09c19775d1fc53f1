"""Attachment service: metadata for files attached to posts and comments.

Uploaders soft-delete their own attachments; administrators purge rows
permanently.
"""

import logging
import uuid

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from discuss_board.config import settings
from discuss_board.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from discuss_board.core.filtering import Contains, Equals, FilterSet, visibility_clause
from discuss_board.core.guard import Principal, ensure_owner_or_role, resolve_visibility
from discuss_board.core.mutation import fetch_active, snapshot, soft_delete
from discuss_board.core.pagination import PageWindow, paginate
from discuss_board.models.content import Attachment
from discuss_board.schemas.comment import AttachmentCreate, AttachmentListRequest
from discuss_board.services.audit import AuditService
from discuss_board.services.comment import comment_under_post
from discuss_board.services.post import STAFF, active_member, visible_post

logger = logging.getLogger(__name__)

ATTACHMENT_FILTERS = FilterSet(
    Contains("file_name", Attachment.file_name),
    Equals("content_type", Attachment.content_type),
    Equals("uploaded_by_member_id", Attachment.uploaded_by_member_id),
)


def _validate_file(data: AttachmentCreate) -> None:
    if data.content_type not in settings.ATTACHMENT_CONTENT_TYPES:
        raise ValidationError(
            f"Content type '{data.content_type}' is not allowed.",
            details=[{"field": "content_type", "message": ", ".join(settings.ATTACHMENT_CONTENT_TYPES)}],
        )
    if data.size_bytes > settings.ATTACHMENT_MAX_BYTES:
        raise ValidationError(f"Attachment exceeds {settings.ATTACHMENT_MAX_BYTES} bytes.")


class AttachmentService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def _create(
        self,
        data: AttachmentCreate,
        principal: Principal,
        *,
        post_id: uuid.UUID | None = None,
        comment_id: uuid.UUID | None = None,
    ) -> Attachment:
        _validate_file(data)
        attachment = Attachment(
            id=uuid.uuid4(),
            post_id=post_id,
            comment_id=comment_id,
            uploaded_by_member_id=principal.member_id,
            file_name=data.file_name,
            file_url=data.file_url,
            content_type=data.content_type,
            size_bytes=data.size_bytes,
        )
        self.db.add(attachment)
        await self.db.flush()
        self.audit.log_create(
            principal.id, "attachment", attachment.id,
            snapshot(attachment, "post_id", "comment_id", "file_name", "content_type"),
        )
        return attachment

    async def attach_to_post(
        self, post_id: uuid.UUID, data: AttachmentCreate, principal: Principal
    ) -> Attachment:
        member = await active_member(self.db, principal)
        post = await visible_post(self.db, post_id, principal)
        if post.author_member_id != member.id:
            raise ForbiddenError("Only the post author may attach files.")
        return await self._create(data, principal, post_id=post.id)

    async def attach_to_comment(
        self, post_id: uuid.UUID, comment_id: uuid.UUID, data: AttachmentCreate, principal: Principal
    ) -> Attachment:
        member = await active_member(self.db, principal)
        await visible_post(self.db, post_id, principal)
        comment = await comment_under_post(self.db, post_id, comment_id)
        if comment.author_member_id != member.id:
            raise ForbiddenError("Only the comment author may attach files.")
        return await self._create(data, principal, comment_id=comment.id)

    async def _list(
        self, parent_clause, request: AttachmentListRequest, window: PageWindow, principal: Principal
    ) -> tuple[list[Attachment], int]:
        visibility = resolve_visibility(principal, request.deleted)
        clauses = [parent_clause, *ATTACHMENT_FILTERS.build(request)]
        deleted_clause = visibility_clause(Attachment, visibility)
        if deleted_clause is not None:
            clauses.append(deleted_clause)
        query = (
            select(Attachment)
            .where(and_(*clauses))
            .order_by(Attachment.created_at.desc(), Attachment.id.desc())
        )
        return await paginate(self.db, query, window)

    async def list_for_post(
        self, post_id: uuid.UUID, request: AttachmentListRequest, window: PageWindow, principal: Principal
    ) -> tuple[list[Attachment], int]:
        post = await visible_post(self.db, post_id, principal)
        ensure_owner_or_role(
            principal, post.author_member_id, *STAFF,
            message="Only the post author or a moderator may list its attachments.",
        )
        return await self._list(Attachment.post_id == post.id, request, window, principal)

    async def list_for_comment(
        self,
        post_id: uuid.UUID,
        comment_id: uuid.UUID,
        request: AttachmentListRequest,
        window: PageWindow,
        principal: Principal,
    ) -> tuple[list[Attachment], int]:
        await visible_post(self.db, post_id, principal)
        comment = await comment_under_post(self.db, post_id, comment_id)
        ensure_owner_or_role(
            principal, comment.author_member_id, *STAFF,
            message="Only the comment author or a moderator may list its attachments.",
        )
        return await self._list(Attachment.comment_id == comment.id, request, window, principal)

    async def delete_attachment(self, attachment_id: uuid.UUID, principal: Principal) -> Attachment:
        attachment = await fetch_active(self.db, Attachment, attachment_id, label="Attachment")
        ensure_owner_or_role(
            principal, attachment.uploaded_by_member_id,
            message="Only the uploader may delete this attachment.",
        )
        soft_delete(attachment)
        await self.db.flush()
        self.audit.log_delete(principal.id, "attachment", attachment.id)
        return attachment

    async def purge_attachment(self, attachment_id: uuid.UUID, principal: Principal) -> None:
        """Remove the row permanently, soft-deleted or not. A second purge is NotFound."""
        result = await self.db.execute(select(Attachment).where(Attachment.id == attachment_id))
        attachment = result.scalar_one_or_none()
        if attachment is None:
            raise NotFoundError("Attachment not found.")

        old_values = snapshot(attachment, "post_id", "comment_id", "file_name", "file_url")
        await self.db.delete(attachment)
        await self.db.flush()
        self.audit.log_delete(principal.id, "attachment", attachment_id, purge=True, old_values=old_values)
