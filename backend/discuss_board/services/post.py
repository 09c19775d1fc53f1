"""Post, tag, post reaction, and post edit history service layer."""

import enum
import logging
import uuid

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from discuss_board.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from discuss_board.core.filtering import Contains, Equals, FilterSet, Range, Where
from discuss_board.core.guard import Principal, ensure_owner_or_role, require_member
from discuss_board.core.mutation import (
    fetch_active,
    merge_fields,
    snapshot,
    soft_delete,
    supplied_fields,
)
from discuss_board.core.pagination import PageWindow, paginate
from discuss_board.core.sorting import SortSpec, parse_sort
from discuss_board.database import flush_or_conflict
from discuss_board.models.account import Member
from discuss_board.models.base import utcnow
from discuss_board.models.content import Post, PostEditHistory, PostReaction, PostTag, Tag
from discuss_board.models.enums import MemberStatus, PostStatus, PrincipalRole
from discuss_board.schemas.post import (
    PostCreate,
    PostEditHistoryListRequest,
    PostListRequest,
    PostReactionCreate,
    PostReactionListRequest,
    PostReactionUpdate,
    PostUpdate,
    TagCreate,
    TagListRequest,
)
from discuss_board.services.audit import AuditService
from discuss_board.services.forbidden_word import screen_text

logger = logging.getLogger(__name__)

STAFF = (PrincipalRole.MODERATOR, PrincipalRole.ADMINISTRATOR)


class PostSort(str, enum.Enum):
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    TITLE = "title"


POST_SORT_COLUMNS = {
    PostSort.CREATED_AT: Post.created_at,
    PostSort.UPDATED_AT: Post.updated_at,
    PostSort.TITLE: Post.title,
}

POST_FILTERS = FilterSet(
    Equals("author_id", Post.author_member_id),
    Equals("status", Post.status),
    Where("tag_id", lambda tag_id: Post.id.in_(
        select(PostTag.post_id).where(PostTag.tag_id == tag_id)
    )),
    Contains("keyword", Post.title, Post.body),
    Range("created_from", "created_to", Post.created_at),
)

TAG_FILTERS = FilterSet(
    Contains("name", Tag.name),
)

EDIT_HISTORY_FILTERS = FilterSet(
    Equals("editor_id", PostEditHistory.editor_account_id),
    Range("edited_from", "edited_to", PostEditHistory.created_at),
)

POST_REACTION_FILTERS = FilterSet(
    Equals("post_id", PostReaction.post_id),
    Equals("reaction_type", PostReaction.reaction_type),
)


async def active_member(db: AsyncSession, principal: Principal) -> Member:
    """Resolve the caller's member row; it must exist and be active."""
    member_id = require_member(principal)
    member = await fetch_active(db, Member, member_id, label="Member")
    if member.status != MemberStatus.ACTIVE:
        raise ForbiddenError("Your membership is suspended.")
    return member


async def visible_post(db: AsyncSession, post_id: uuid.UUID, principal: Principal | None) -> Post:
    """Resolve a post the caller may see. A hidden post is "not found" for
    anyone but its author and staff, including through nested paths."""
    post = await fetch_active(db, Post, post_id, label="Post")
    if post.status == PostStatus.HIDDEN:
        if principal is None or not (principal.is_privileged or principal.owns(post.author_member_id)):
            raise NotFoundError("Post not found.")
    return post


class PostService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def _require_tags(self, tag_ids: list[uuid.UUID]) -> list[uuid.UUID]:
        unique_ids = list(dict.fromkeys(tag_ids))
        if not unique_ids:
            return []
        result = await self.db.execute(
            select(Tag.id).where(Tag.id.in_(unique_ids), Tag.deleted_at.is_(None))
        )
        found = set(result.scalars().all())
        missing = [str(t) for t in unique_ids if t not in found]
        if missing:
            raise NotFoundError("Tag not found.", details=[{"field": "tag_ids", "message": m} for m in missing])
        return unique_ids

    async def create_post(self, data: PostCreate, principal: Principal) -> Post:
        member = await active_member(self.db, principal)
        await screen_text(self.db, {"title": data.title, "body": data.body})
        tag_ids = await self._require_tags(data.tag_ids)

        post = Post(
            id=uuid.uuid4(),
            author_member_id=member.id,
            title=data.title,
            body=data.body,
            status=PostStatus.PUBLIC,
        )
        self.db.add(post)
        await self.db.flush()
        for tag_id in tag_ids:
            self.db.add(PostTag(id=uuid.uuid4(), post_id=post.id, tag_id=tag_id))
        await self.db.flush()
        await self.db.refresh(post, attribute_names=["tags"])

        self.audit.log_create(principal.id, "post", post.id, snapshot(post, "title", "status"))
        return post

    async def list_posts(
        self, request: PostListRequest, window: PageWindow, principal: Principal | None = None
    ) -> tuple[list[Post], int]:
        sort = parse_sort(request.sort, PostSort, PostSort.CREATED_AT)
        if request.sort_order in ("asc", "desc"):
            sort = SortSpec(sort.field, request.sort_order == "desc")

        clauses = [Post.deleted_at.is_(None), *POST_FILTERS.build(request)]
        if principal is None or not principal.is_privileged:
            # Hidden posts are only listed for their author
            visible = Post.status != PostStatus.HIDDEN
            if principal is not None and principal.member_id is not None:
                visible = or_(visible, Post.author_member_id == principal.member_id)
            clauses.append(visible)

        query = (
            select(Post)
            .where(and_(*clauses))
            .order_by(*sort.order_by(POST_SORT_COLUMNS, Post.id))
        )
        return await paginate(self.db, query, window)

    async def get_post(self, post_id: uuid.UUID, principal: Principal | None = None) -> Post:
        return await visible_post(self.db, post_id, principal)

    async def update_post(self, post_id: uuid.UUID, data: PostUpdate, principal: Principal) -> Post:
        post = await visible_post(self.db, post_id, principal)
        ensure_owner_or_role(principal, post.author_member_id, *STAFF)

        is_staff = principal.role in STAFF
        if not is_staff:
            if post.is_locked:
                raise ConflictError("Post is locked and can no longer be edited.")
            if data.status == PostStatus.LOCKED:
                raise ForbiddenError("Only moderators may lock posts.")

        changes = supplied_fields(data, "title", "body", "status", "tag_ids")
        changes.pop("tag_ids", None)
        await screen_text(self.db, {"title": changes.get("title"), "body": changes.get("body")})

        previous_title, previous_body = post.title, post.body
        old_values, new_values = merge_fields(post, changes)
        if "title" in new_values or "body" in new_values:
            self.db.add(PostEditHistory(
                id=uuid.uuid4(),
                post_id=post.id,
                editor_account_id=principal.id,
                editor_role=principal.role,
                previous_title=previous_title,
                previous_body=previous_body,
                edited_title=post.title,
                edited_body=post.body,
            ))

        if data.tag_ids is not None:
            tag_ids = await self._require_tags(data.tag_ids)
            current = {tag.id for tag in post.tags}
            if set(tag_ids) != current:
                await self.db.execute(delete(PostTag).where(PostTag.post_id == post.id))
                for tag_id in tag_ids:
                    self.db.add(PostTag(id=uuid.uuid4(), post_id=post.id, tag_id=tag_id))
                old_values["tag_ids"] = sorted(str(t) for t in current)
                new_values["tag_ids"] = sorted(str(t) for t in tag_ids)

        await self.db.flush()
        await self.db.refresh(post, attribute_names=["tags"])
        self.audit.log_update(principal.id, "post", post.id, old_values, new_values)
        return post

    async def delete_post(self, post_id: uuid.UUID, principal: Principal) -> Post:
        post = await visible_post(self.db, post_id, principal)
        ensure_owner_or_role(principal, post.author_member_id, *STAFF)
        soft_delete(post)
        await self.db.flush()
        self.audit.log_delete(principal.id, "post", post.id)
        return post

    async def list_edit_histories(
        self,
        post_id: uuid.UUID,
        request: PostEditHistoryListRequest,
        window: PageWindow,
        principal: Principal | None,
    ) -> tuple[list[PostEditHistory], int]:
        """Edit history is as public as the post itself. Newest first."""
        await visible_post(self.db, post_id, principal)
        query = (
            select(PostEditHistory)
            .where(and_(PostEditHistory.post_id == post_id, *EDIT_HISTORY_FILTERS.build(request)))
            .order_by(PostEditHistory.created_at.desc(), PostEditHistory.id.desc())
        )
        return await paginate(self.db, query, window)

    async def get_edit_history(
        self, post_id: uuid.UUID, history_id: uuid.UUID, principal: Principal | None
    ) -> PostEditHistory:
        await visible_post(self.db, post_id, principal)
        result = await self.db.execute(
            select(PostEditHistory).where(
                PostEditHistory.id == history_id,
                PostEditHistory.post_id == post_id,
            )
        )
        history = result.scalar_one_or_none()
        if history is None:
            raise NotFoundError("Edit history not found.")
        return history


class TagService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def create_tag(self, data: TagCreate, principal: Principal) -> Tag:
        taken = await self.db.execute(
            select(Tag.id).where(Tag.name == data.name, Tag.deleted_at.is_(None))
        )
        if taken.scalar_one_or_none() is not None:
            raise ConflictError(f"Tag '{data.name}' already exists.")

        tag = Tag(id=uuid.uuid4(), name=data.name, description=data.description)
        self.db.add(tag)
        await flush_or_conflict(self.db, f"Tag '{data.name}' already exists.")
        self.audit.log_create(principal.id, "tag", tag.id, {"name": tag.name})
        return tag

    async def list_tags(self, request: TagListRequest, window: PageWindow) -> tuple[list[Tag], int]:
        query = (
            select(Tag)
            .where(and_(Tag.deleted_at.is_(None), *TAG_FILTERS.build(request)))
            .order_by(Tag.name.asc(), Tag.id.asc())
        )
        return await paginate(self.db, query, window)

    async def get_tag(self, tag_id: uuid.UUID) -> Tag:
        return await fetch_active(self.db, Tag, tag_id, label="Tag")


class PostReactionService:
    """Like/dislike on posts. One row per (member, post); a removed reaction
    is revived on the next create instead of inserting a duplicate."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def create_reaction(self, data: PostReactionCreate, principal: Principal) -> PostReaction:
        member = await active_member(self.db, principal)
        post = await visible_post(self.db, data.post_id, principal)
        if post.is_locked:
            raise ConflictError("Post is locked.")

        result = await self.db.execute(
            select(PostReaction).where(
                PostReaction.member_id == member.id,
                PostReaction.post_id == post.id,
            )
        )
        reaction = result.scalar_one_or_none()
        if reaction is not None and reaction.deleted_at is None:
            raise ConflictError("You have already reacted to this post.")

        if reaction is not None:
            reaction.deleted_at = None
            reaction.reaction_type = data.reaction_type
            reaction.updated_at = utcnow()
        else:
            reaction = PostReaction(
                id=uuid.uuid4(),
                member_id=member.id,
                post_id=post.id,
                reaction_type=data.reaction_type,
            )
            self.db.add(reaction)
        await flush_or_conflict(self.db, "You have already reacted to this post.")
        self.audit.log_create(
            principal.id, "post_reaction", reaction.id, snapshot(reaction, "post_id", "reaction_type")
        )
        return reaction

    async def list_reactions(
        self, request: PostReactionListRequest, window: PageWindow, principal: Principal
    ) -> tuple[list[PostReaction], int]:
        clauses = [PostReaction.deleted_at.is_(None), *POST_REACTION_FILTERS.build(request)]
        if principal.role in STAFF:
            if request.member_id is not None:
                clauses.append(PostReaction.member_id == request.member_id)
        else:
            clauses.append(PostReaction.member_id == principal.member_id)

        query = (
            select(PostReaction)
            .where(and_(*clauses))
            .order_by(PostReaction.created_at.desc(), PostReaction.id.desc())
        )
        return await paginate(self.db, query, window)

    async def get_reaction(self, reaction_id: uuid.UUID, principal: Principal) -> PostReaction:
        reaction = await fetch_active(self.db, PostReaction, reaction_id, label="Reaction")
        ensure_owner_or_role(principal, reaction.member_id, *STAFF)
        return reaction

    async def update_reaction(
        self, reaction_id: uuid.UUID, data: PostReactionUpdate, principal: Principal
    ) -> PostReaction:
        reaction = await fetch_active(self.db, PostReaction, reaction_id, label="Reaction")
        ensure_owner_or_role(principal, reaction.member_id, message="You may only change your own reaction.")

        old_values, new_values = merge_fields(reaction, supplied_fields(data, "reaction_type"))
        await self.db.flush()
        self.audit.log_update(principal.id, "post_reaction", reaction.id, old_values, new_values)
        return reaction

    async def delete_reaction(self, reaction_id: uuid.UUID, principal: Principal) -> PostReaction:
        reaction = await fetch_active(self.db, PostReaction, reaction_id, label="Reaction")
        ensure_owner_or_role(principal, reaction.member_id, message="You may only remove your own reaction.")
        soft_delete(reaction)
        await self.db.flush()
        self.audit.log_delete(principal.id, "post_reaction", reaction.id)
        return reaction
