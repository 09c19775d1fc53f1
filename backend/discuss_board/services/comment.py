"""Comment, edit history, deletion log, and reaction service layer."""

import enum
import logging
import uuid

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from discuss_board.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from discuss_board.core.filtering import Contains, Equals, FilterSet, Range, visibility_clause
from discuss_board.core.guard import Principal, ensure_owner_or_role, resolve_visibility
from discuss_board.core.mutation import (
    fetch_active,
    merge_fields,
    snapshot,
    soft_delete,
    supplied_fields,
)
from discuss_board.core.pagination import PageWindow, paginate
from discuss_board.core.sorting import parse_sort
from discuss_board.database import flush_or_conflict
from discuss_board.models.base import utcnow
from discuss_board.models.content import Comment, CommentDeletionLog, CommentEditHistory, CommentReaction
from discuss_board.schemas.comment import (
    CommentCreate,
    CommentEditHistoryListRequest,
    CommentListRequest,
    CommentUpdate,
    DeletionLogListRequest,
    ReactionCreate,
    ReactionListRequest,
    ReactionUpdate,
)
from discuss_board.services.audit import AuditService
from discuss_board.services.forbidden_word import screen_text
from discuss_board.services.post import STAFF, active_member, visible_post

logger = logging.getLogger(__name__)


class CommentSort(str, enum.Enum):
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


COMMENT_SORT_COLUMNS = {
    CommentSort.CREATED_AT: Comment.created_at,
    CommentSort.UPDATED_AT: Comment.updated_at,
}

COMMENT_FILTERS = FilterSet(
    Equals("author_id", Comment.author_member_id),
    Contains("keyword", Comment.body),
    Range("created_from", "created_to", Comment.created_at),
)

EDIT_HISTORY_FILTERS = FilterSet(
    Equals("editor_id", CommentEditHistory.editor_account_id),
    Range("edited_from", "edited_to", CommentEditHistory.created_at),
)

DELETION_LOG_FILTERS = FilterSet(
    Equals("actor_role", CommentDeletionLog.actor_role),
    Range("created_from", "created_to", CommentDeletionLog.created_at),
)

REACTION_FILTERS = FilterSet(
    Equals("comment_id", CommentReaction.comment_id),
    Equals("reaction_type", CommentReaction.reaction_type),
)


async def comment_under_post(db: AsyncSession, post_id: uuid.UUID, comment_id: uuid.UUID) -> Comment:
    """A comment addressed through a post path must belong to that post."""
    result = await db.execute(
        select(Comment).where(
            Comment.id == comment_id,
            Comment.post_id == post_id,
            Comment.deleted_at.is_(None),
        )
    )
    comment = result.scalar_one_or_none()
    if comment is None:
        raise NotFoundError("Comment not found.")
    return comment


class CommentService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def create_comment(
        self, post_id: uuid.UUID, data: CommentCreate, principal: Principal
    ) -> Comment:
        member = await active_member(self.db, principal)
        post = await visible_post(self.db, post_id, principal)
        if post.is_locked:
            raise ConflictError("Post is locked; new comments are not accepted.")

        if data.parent_id is not None:
            parent = await fetch_active(self.db, Comment, data.parent_id, label="Parent comment")
            if parent.post_id != post.id:
                raise ValidationError("Parent comment belongs to a different post.")
        await screen_text(self.db, {"body": data.body})

        comment = Comment(
            id=uuid.uuid4(),
            post_id=post.id,
            author_member_id=member.id,
            parent_id=data.parent_id,
            body=data.body,
        )
        self.db.add(comment)
        await self.db.flush()
        self.audit.log_create(principal.id, "comment", comment.id, snapshot(comment, "post_id", "parent_id"))
        return comment

    async def list_comments(
        self,
        post_id: uuid.UUID,
        request: CommentListRequest,
        window: PageWindow,
        principal: Principal | None,
    ) -> tuple[list[Comment], int]:
        visibility = resolve_visibility(principal, request.deleted)
        await visible_post(self.db, post_id, principal)

        sort = parse_sort(request.sort, CommentSort, CommentSort.CREATED_AT, default_descending=False)
        clauses = [Comment.post_id == post_id, *COMMENT_FILTERS.build(request)]
        deleted_clause = visibility_clause(Comment, visibility)
        if deleted_clause is not None:
            clauses.append(deleted_clause)

        query = (
            select(Comment)
            .where(and_(*clauses))
            .order_by(*sort.order_by(COMMENT_SORT_COLUMNS, Comment.id))
        )
        return await paginate(self.db, query, window)

    async def get_comment(
        self, post_id: uuid.UUID, comment_id: uuid.UUID, principal: Principal | None = None
    ) -> Comment:
        await visible_post(self.db, post_id, principal)
        return await comment_under_post(self.db, post_id, comment_id)

    async def update_comment(
        self, post_id: uuid.UUID, comment_id: uuid.UUID, data: CommentUpdate, principal: Principal
    ) -> Comment:
        comment = await self.get_comment(post_id, comment_id, principal)
        ensure_owner_or_role(principal, comment.author_member_id, *STAFF)

        changes = supplied_fields(data, "body", "is_locked")
        if principal.role not in STAFF:
            if "is_locked" in changes:
                raise ForbiddenError("Only moderators may lock comments.")
            if comment.is_locked:
                raise ConflictError("Comment is locked and can no longer be edited.")

        await screen_text(self.db, {"body": changes.get("body")})

        previous_body = comment.body
        old_values, new_values = merge_fields(comment, changes)
        if "body" in new_values:
            self.db.add(CommentEditHistory(
                id=uuid.uuid4(),
                comment_id=comment.id,
                post_id=comment.post_id,
                editor_account_id=principal.id,
                editor_role=principal.role,
                previous_content=previous_body,
                edited_content=comment.body,
            ))
        await self.db.flush()
        self.audit.log_update(principal.id, "comment", comment.id, old_values, new_values)
        return comment

    async def delete_comment(
        self,
        post_id: uuid.UUID,
        comment_id: uuid.UUID,
        principal: Principal,
        reason: str | None = None,
    ) -> Comment:
        comment = await self.get_comment(post_id, comment_id, principal)
        ensure_owner_or_role(principal, comment.author_member_id, *STAFF)

        soft_delete(comment)
        self.db.add(CommentDeletionLog(
            id=uuid.uuid4(),
            comment_id=comment.id,
            post_id=comment.post_id,
            deleted_by_account_id=principal.id,
            actor_role=principal.role,
            reason=reason,
        ))
        await self.db.flush()
        self.audit.log_delete(principal.id, "comment", comment.id)
        return comment

    async def list_edit_histories(
        self,
        post_id: uuid.UUID,
        comment_id: uuid.UUID,
        request: CommentEditHistoryListRequest,
        window: PageWindow,
        principal: Principal,
    ) -> tuple[list[CommentEditHistory], int]:
        comment = await self.get_comment(post_id, comment_id, principal)
        ensure_owner_or_role(
            principal, comment.author_member_id, *STAFF,
            message="Only the comment author or a moderator may view its edit history.",
        )
        query = (
            select(CommentEditHistory)
            .where(and_(CommentEditHistory.comment_id == comment.id, *EDIT_HISTORY_FILTERS.build(request)))
            .order_by(CommentEditHistory.created_at.desc(), CommentEditHistory.id.desc())
        )
        return await paginate(self.db, query, window)

    async def get_edit_history(
        self, post_id: uuid.UUID, comment_id: uuid.UUID, history_id: uuid.UUID, principal: Principal
    ) -> CommentEditHistory:
        comment = await self.get_comment(post_id, comment_id, principal)
        ensure_owner_or_role(
            principal, comment.author_member_id, *STAFF,
            message="Only the comment author or a moderator may view its edit history.",
        )
        result = await self.db.execute(
            select(CommentEditHistory).where(
                CommentEditHistory.id == history_id,
                CommentEditHistory.comment_id == comment.id,
            )
        )
        history = result.scalar_one_or_none()
        if history is None:
            raise NotFoundError("Edit history not found.")
        return history

    async def list_deletion_logs(
        self,
        post_id: uuid.UUID,
        comment_id: uuid.UUID,
        request: DeletionLogListRequest,
        window: PageWindow,
    ) -> tuple[list[CommentDeletionLog], int]:
        """Both path ids are part of the predicate: a comment that is not
        under the post yields an empty page rather than an error."""
        query = (
            select(CommentDeletionLog)
            .where(and_(
                CommentDeletionLog.post_id == post_id,
                CommentDeletionLog.comment_id == comment_id,
                *DELETION_LOG_FILTERS.build(request),
            ))
            .order_by(CommentDeletionLog.created_at.desc(), CommentDeletionLog.id.desc())
        )
        return await paginate(self.db, query, window)


class ReactionService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def create_reaction(self, data: ReactionCreate, principal: Principal) -> CommentReaction:
        member = await active_member(self.db, principal)
        comment = await fetch_active(self.db, Comment, data.comment_id, label="Comment")
        await visible_post(self.db, comment.post_id, principal)
        if comment.is_locked:
            raise ConflictError("Comment is locked.")
        if comment.author_member_id == member.id:
            raise ForbiddenError("You cannot react to your own comment.")

        result = await self.db.execute(
            select(CommentReaction).where(
                CommentReaction.member_id == member.id,
                CommentReaction.comment_id == comment.id,
            )
        )
        reaction = result.scalar_one_or_none()
        if reaction is not None and reaction.deleted_at is None:
            raise ConflictError("You have already reacted to this comment.")

        if reaction is not None:
            # Revive the soft-deleted row; (member_id, comment_id) is unique
            now = utcnow()
            reaction.deleted_at = None
            reaction.reaction_type = data.reaction_type
            reaction.updated_at = now
        else:
            reaction = CommentReaction(
                id=uuid.uuid4(),
                member_id=member.id,
                comment_id=comment.id,
                reaction_type=data.reaction_type,
            )
            self.db.add(reaction)
        await flush_or_conflict(self.db, "You have already reacted to this comment.")
        self.audit.log_create(
            principal.id, "comment_reaction", reaction.id, snapshot(reaction, "comment_id", "reaction_type")
        )
        return reaction

    async def list_reactions(
        self, request: ReactionListRequest, window: PageWindow, principal: Principal
    ) -> tuple[list[CommentReaction], int]:
        clauses = [CommentReaction.deleted_at.is_(None), *REACTION_FILTERS.build(request)]
        if principal.role in STAFF:
            if request.member_id is not None:
                clauses.append(CommentReaction.member_id == request.member_id)
        else:
            clauses.append(CommentReaction.member_id == principal.member_id)

        query = (
            select(CommentReaction)
            .where(and_(*clauses))
            .order_by(CommentReaction.created_at.desc(), CommentReaction.id.desc())
        )
        return await paginate(self.db, query, window)

    async def get_reaction(self, reaction_id: uuid.UUID, principal: Principal) -> CommentReaction:
        reaction = await fetch_active(self.db, CommentReaction, reaction_id, label="Reaction")
        ensure_owner_or_role(principal, reaction.member_id, *STAFF)
        return reaction

    async def update_reaction(
        self, reaction_id: uuid.UUID, data: ReactionUpdate, principal: Principal
    ) -> CommentReaction:
        reaction = await fetch_active(self.db, CommentReaction, reaction_id, label="Reaction")
        ensure_owner_or_role(principal, reaction.member_id, message="You may only change your own reaction.")

        changes = supplied_fields(data, "reaction_type")
        old_values, new_values = merge_fields(reaction, changes)
        await self.db.flush()
        self.audit.log_update(principal.id, "comment_reaction", reaction.id, old_values, new_values)
        return reaction

    async def delete_reaction(self, reaction_id: uuid.UUID, principal: Principal) -> CommentReaction:
        reaction = await fetch_active(self.db, CommentReaction, reaction_id, label="Reaction")
        ensure_owner_or_role(principal, reaction.member_id, message="You may only remove your own reaction.")
        soft_delete(reaction)
        await self.db.flush()
        self.audit.log_delete(principal.id, "comment_reaction", reaction.id)
        return reaction
