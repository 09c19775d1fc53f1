"""Content reports, moderation actions, moderation logs, appeals, and forbidden words."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from discuss_board.models.base import BaseModel, BaseModelNoSoftDelete, enum_column
from discuss_board.models.enums import (
    AppealStatus,
    ModerationActionStatus,
    ModerationActionType,
    ModerationLogEvent,
    ModerationTarget,
    ReportContentType,
    ReportStatus,
)


class ContentReport(BaseModel):
    """A member's report against exactly one post or comment."""

    __tablename__ = "content_report"

    reporter_member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("member.id"), nullable=False
    )
    content_type: Mapped[ReportContentType] = mapped_column(
        enum_column(ReportContentType), nullable=False
    )
    content_post_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("post.id"), nullable=True
    )
    content_comment_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("comment.id"), nullable=True
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[ReportStatus] = mapped_column(
        enum_column(ReportStatus), default=ReportStatus.PENDING, nullable=False
    )
    moderation_action_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("moderation_action.id"), nullable=True
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "(content_post_id IS NULL) <> (content_comment_id IS NULL)",
            name="ck_content_report_single_target",
        ),
        Index(
            "uq_content_report_reporter_post",
            "reporter_member_id",
            "content_post_id",
            unique=True,
            postgresql_where=text("deleted_at IS NULL AND content_post_id IS NOT NULL"),
            sqlite_where=text("deleted_at IS NULL AND content_post_id IS NOT NULL"),
        ),
        Index(
            "uq_content_report_reporter_comment",
            "reporter_member_id",
            "content_comment_id",
            unique=True,
            postgresql_where=text("deleted_at IS NULL AND content_comment_id IS NOT NULL"),
            sqlite_where=text("deleted_at IS NULL AND content_comment_id IS NOT NULL"),
        ),
        Index("ix_content_report_status", "status"),
    )


class ModerationAction(BaseModel):
    """An intervention against exactly one member, post or comment.

    ``content_type`` names which of the three target columns is populated.
    """

    __tablename__ = "moderation_action"

    moderator_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("user_account.id"), nullable=False
    )
    content_type: Mapped[ModerationTarget] = mapped_column(
        enum_column(ModerationTarget), nullable=False
    )
    target_member_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("member.id"), nullable=True
    )
    target_post_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("post.id"), nullable=True
    )
    target_comment_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("comment.id"), nullable=True
    )
    action_type: Mapped[ModerationActionType] = mapped_column(
        enum_column(ModerationActionType), nullable=False
    )
    action_reason: Mapped[str] = mapped_column(Text, nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ModerationActionStatus] = mapped_column(
        enum_column(ModerationActionStatus), default=ModerationActionStatus.ACTIVE, nullable=False
    )
    effective_from: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    effective_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_moderation_action_moderator", "moderator_account_id"),
        Index("ix_moderation_action_member", "target_member_id"),
        Index("ix_moderation_action_created", "created_at"),
    )


class ModerationLog(BaseModelNoSoftDelete):
    """Timeline entry for a moderation action. Purged, never soft-deleted."""

    __tablename__ = "moderation_log"

    moderation_action_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("moderation_action.id"), nullable=False
    )
    actor_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("user_account.id"), nullable=False
    )
    event_type: Mapped[ModerationLogEvent] = mapped_column(
        enum_column(ModerationLogEvent), nullable=False
    )
    event_details: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_moderation_log_action", "moderation_action_id", "created_at"),
    )


class Appeal(BaseModel):
    __tablename__ = "appeal"

    moderation_action_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("moderation_action.id"), nullable=False
    )
    appellant_member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("member.id"), nullable=False
    )
    appeal_rationale: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[AppealStatus] = mapped_column(
        enum_column(AppealStatus), default=AppealStatus.PENDING, nullable=False
    )
    resolution_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    resolved_by_account_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("user_account.id"), nullable=True
    )

    __table_args__ = (
        Index(
            "uq_appeal_action_appellant_active",
            "moderation_action_id",
            "appellant_member_id",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )


class ForbiddenWord(BaseModel):
    """An expression that posts and comments may not contain (case-insensitive)."""

    __tablename__ = "forbidden_word"

    expression: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index(
            "uq_forbidden_word_expression_active",
            "expression",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )
