"""Posts, tags, comments, reactions, edit histories, deletion logs, and attachments."""

import uuid

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from discuss_board.models.base import BaseModel, BaseModelNoSoftDelete, enum_column
from discuss_board.models.enums import PostStatus, PrincipalRole, ReactionType


class Post(BaseModel):
    __tablename__ = "post"

    author_member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("member.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[PostStatus] = mapped_column(
        enum_column(PostStatus), default=PostStatus.PUBLIC, nullable=False
    )

    tags: Mapped[list["Tag"]] = relationship(
        secondary="post_tag", lazy="selectin", viewonly=True, order_by="Tag.name"
    )

    @property
    def is_locked(self) -> bool:
        return self.status == PostStatus.LOCKED

    __table_args__ = (
        Index("ix_post_author", "author_member_id"),
        Index("ix_post_created", "created_at"),
    )


class Tag(BaseModel):
    __tablename__ = "tag"

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index(
            "uq_tag_name_active",
            "name",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )


class PostTag(BaseModelNoSoftDelete):
    __tablename__ = "post_tag"

    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("post.id"), nullable=False
    )
    tag_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("tag.id"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("post_id", "tag_id", name="uq_post_tag"),
        Index("ix_post_tag_tag", "tag_id"),
    )


class Comment(BaseModel):
    __tablename__ = "comment"

    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("post.id"), nullable=False
    )
    author_member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("member.id"), nullable=False
    )
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("comment.id"), nullable=True
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")

    __table_args__ = (
        Index("ix_comment_post", "post_id"),
        Index("ix_comment_author", "author_member_id"),
    )


class CommentDeletionLog(BaseModelNoSoftDelete):
    __tablename__ = "comment_deletion_log"

    comment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("comment.id"), nullable=False
    )
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("post.id"), nullable=False
    )
    deleted_by_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("user_account.id"), nullable=False
    )
    actor_role: Mapped[PrincipalRole] = mapped_column(enum_column(PrincipalRole), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_comment_deletion_log_comment", "comment_id"),
    )


class CommentReaction(BaseModel):
    """One row per (member, comment). A soft-deleted row is revived, never duplicated."""

    __tablename__ = "comment_reaction"

    member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("member.id"), nullable=False
    )
    comment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("comment.id"), nullable=False
    )
    reaction_type: Mapped[ReactionType] = mapped_column(enum_column(ReactionType), nullable=False)

    __table_args__ = (
        UniqueConstraint("member_id", "comment_id", name="uq_comment_reaction_member_comment"),
    )


class PostReaction(BaseModel):
    """One row per (member, post). Authors may react to their own posts."""

    __tablename__ = "post_reaction"

    member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("member.id"), nullable=False
    )
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("post.id"), nullable=False
    )
    reaction_type: Mapped[ReactionType] = mapped_column(enum_column(ReactionType), nullable=False)

    __table_args__ = (
        UniqueConstraint("member_id", "post_id", name="uq_post_reaction_member_post"),
        Index("ix_post_reaction_post", "post_id"),
    )


class PostEditHistory(BaseModelNoSoftDelete):
    """Written once per post update that changes the title or the body."""

    __tablename__ = "post_edit_history"

    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("post.id"), nullable=False
    )
    editor_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("user_account.id"), nullable=False
    )
    editor_role: Mapped[PrincipalRole] = mapped_column(enum_column(PrincipalRole), nullable=False)
    previous_title: Mapped[str] = mapped_column(String(300), nullable=False)
    previous_body: Mapped[str] = mapped_column(Text, nullable=False)
    edited_title: Mapped[str] = mapped_column(String(300), nullable=False)
    edited_body: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        Index("ix_post_edit_history_post", "post_id", "created_at"),
    )


class CommentEditHistory(BaseModelNoSoftDelete):
    __tablename__ = "comment_edit_history"

    comment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("comment.id"), nullable=False
    )
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("post.id"), nullable=False
    )
    editor_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("user_account.id"), nullable=False
    )
    editor_role: Mapped[PrincipalRole] = mapped_column(enum_column(PrincipalRole), nullable=False)
    previous_content: Mapped[str] = mapped_column(Text, nullable=False)
    edited_content: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        Index("ix_comment_edit_history_comment", "comment_id", "created_at"),
    )


class Attachment(BaseModel):
    __tablename__ = "attachment"

    post_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("post.id"), nullable=True
    )
    comment_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("comment.id"), nullable=True
    )
    uploaded_by_member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("member.id"), nullable=False
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "(post_id IS NULL) <> (comment_id IS NULL)",
            name="ck_attachment_single_parent",
        ),
        Index("ix_attachment_post", "post_id"),
        Index("ix_attachment_comment", "comment_id"),
    )
