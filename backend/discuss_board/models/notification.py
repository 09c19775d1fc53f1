"""Notification and notification channel models."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from discuss_board.models.base import BaseModel, enum_column
from discuss_board.models.enums import ChannelType, NotificationType


class Notification(BaseModel):
    __tablename__ = "notification"

    recipient_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("user_account.id"), nullable=False
    )
    notification_type: Mapped[NotificationType] = mapped_column(
        enum_column(NotificationType), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    entity_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    entity_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_notification_recipient", "recipient_account_id"),
        Index("ix_notification_read", "is_read"),
        Index("ix_notification_created", "created_at"),
    )


class NotificationChannel(BaseModel):
    """A subscriber's delivery channel for activity of another member.

    Unique on (member_id, subscriber_member_id, channel_type) among active rows.
    """

    __tablename__ = "notification_channel"

    member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("member.id"), nullable=False
    )
    subscriber_member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("member.id"), nullable=False
    )
    channel_type: Mapped[ChannelType] = mapped_column(enum_column(ChannelType), nullable=False)
    is_enabled: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true")

    __table_args__ = (
        Index(
            "uq_notification_channel_active",
            "member_id",
            "subscriber_member_id",
            "channel_type",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )
