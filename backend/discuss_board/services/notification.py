"""Notification service: create, list, mark-read. Plus notification channels."""

import logging
import uuid

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from discuss_board.core.exceptions import ConflictError, ForbiddenError
from discuss_board.core.filtering import Equals, FilterSet
from discuss_board.core.guard import Principal, ensure_owner_or_role, require_member
from discuss_board.core.mutation import (
    fetch_active,
    merge_fields,
    snapshot,
    soft_delete,
    supplied_fields,
)
from discuss_board.core.pagination import PageWindow, paginate
from discuss_board.database import flush_or_conflict
from discuss_board.models.account import Member
from discuss_board.models.base import utcnow
from discuss_board.models.enums import NotificationType
from discuss_board.models.notification import Notification, NotificationChannel
from discuss_board.schemas.notification import (
    AdminNotificationListRequest,
    ChannelCreate,
    ChannelListRequest,
    ChannelUpdate,
    NotificationListRequest,
)
from discuss_board.services.audit import AuditService
from discuss_board.services.post import active_member

logger = logging.getLogger(__name__)

NOTIFICATION_FILTERS = FilterSet(
    Equals("notification_type", Notification.notification_type),
    Equals("is_read", Notification.is_read),
    Equals("recipient_account_id", Notification.recipient_account_id),
)

CHANNEL_FILTERS = FilterSet(
    Equals("member_id", NotificationChannel.member_id),
    Equals("channel_type", NotificationChannel.channel_type),
    Equals("is_enabled", NotificationChannel.is_enabled),
)


class NotificationService:
    def __init__(self, db: AsyncSession):
        self.db = db

    def notify(
        self,
        recipient_account_id: uuid.UUID,
        notification_type: NotificationType,
        title: str,
        body: str,
        entity_type: str | None = None,
        entity_id: uuid.UUID | None = None,
    ) -> Notification:
        """Queue an in-app notification in the current transaction."""
        notification = Notification(
            id=uuid.uuid4(),
            recipient_account_id=recipient_account_id,
            notification_type=notification_type,
            title=title,
            body=body,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        self.db.add(notification)
        logger.info(
            "Notification %s queued for account %s (%s/%s)",
            notification_type.value, recipient_account_id, entity_type, entity_id,
        )
        return notification

    async def list_notifications(
        self,
        request: NotificationListRequest | AdminNotificationListRequest,
        window: PageWindow,
        recipient_account_id: uuid.UUID | None = None,
    ) -> tuple[list[Notification], int]:
        """List notifications. ``recipient_account_id`` pins the listing to one inbox."""
        clauses = [Notification.deleted_at.is_(None), *NOTIFICATION_FILTERS.build(request)]
        if recipient_account_id is not None:
            clauses.append(Notification.recipient_account_id == recipient_account_id)
        query = (
            select(Notification)
            .where(and_(*clauses))
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return await paginate(self.db, query, window)

    async def _owned(self, notification_id: uuid.UUID, principal: Principal) -> Notification:
        notification = await fetch_active(self.db, Notification, notification_id, label="Notification")
        if notification.recipient_account_id != principal.id:
            raise ForbiddenError("This notification belongs to another account.")
        return notification

    async def mark_read(self, notification_id: uuid.UUID, principal: Principal) -> Notification:
        notification = await self._owned(notification_id, principal)
        if not notification.is_read:
            now = utcnow()
            notification.is_read = True
            notification.read_at = now
            notification.updated_at = now
            await self.db.flush()
        return notification

    async def delete_notification(self, notification_id: uuid.UUID, principal: Principal) -> Notification:
        notification = await self._owned(notification_id, principal)
        soft_delete(notification)
        await self.db.flush()
        return notification


class ChannelService:
    """Subscriptions keyed by (member_id, subscriber_member_id, channel_type)."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def _ensure_unique(
        self,
        member_id: uuid.UUID,
        subscriber_member_id: uuid.UUID,
        channel_type,
        exclude_id: uuid.UUID | None = None,
    ) -> None:
        query = select(NotificationChannel.id).where(
            NotificationChannel.member_id == member_id,
            NotificationChannel.subscriber_member_id == subscriber_member_id,
            NotificationChannel.channel_type == channel_type,
            NotificationChannel.deleted_at.is_(None),
        )
        if exclude_id is not None:
            query = query.where(NotificationChannel.id != exclude_id)
        if (await self.db.execute(query)).scalar_one_or_none() is not None:
            raise ConflictError("A channel of this type already exists for this member.")

    async def create_channel(self, data: ChannelCreate, principal: Principal) -> NotificationChannel:
        subscriber = await active_member(self.db, principal)
        await fetch_active(self.db, Member, data.member_id, label="Member")
        await self._ensure_unique(data.member_id, subscriber.id, data.channel_type)

        channel = NotificationChannel(
            id=uuid.uuid4(),
            member_id=data.member_id,
            subscriber_member_id=subscriber.id,
            channel_type=data.channel_type,
            is_enabled=data.is_enabled,
        )
        self.db.add(channel)
        await flush_or_conflict(self.db, "A channel of this type already exists for this member.")
        self.audit.log_create(
            principal.id, "notification_channel", channel.id,
            snapshot(channel, "member_id", "channel_type", "is_enabled"),
        )
        return channel

    async def list_channels(
        self, request: ChannelListRequest, window: PageWindow, principal: Principal
    ) -> tuple[list[NotificationChannel], int]:
        subscriber_id = require_member(principal)
        query = (
            select(NotificationChannel)
            .where(and_(
                NotificationChannel.deleted_at.is_(None),
                NotificationChannel.subscriber_member_id == subscriber_id,
                *CHANNEL_FILTERS.build(request),
            ))
            .order_by(NotificationChannel.created_at.desc(), NotificationChannel.id.desc())
        )
        return await paginate(self.db, query, window)

    async def get_channel(self, channel_id: uuid.UUID, principal: Principal) -> NotificationChannel:
        channel = await fetch_active(self.db, NotificationChannel, channel_id, label="Notification channel")
        ensure_owner_or_role(principal, channel.subscriber_member_id, message="This channel belongs to another member.")
        return channel

    async def update_channel(
        self, channel_id: uuid.UUID, data: ChannelUpdate, principal: Principal
    ) -> NotificationChannel:
        channel = await self.get_channel(channel_id, principal)
        changes = supplied_fields(data, "member_id", "channel_type", "is_enabled")

        member_id = changes.get("member_id", channel.member_id)
        channel_type = changes.get("channel_type", channel.channel_type)
        if member_id != channel.member_id or channel_type != channel.channel_type:
            if member_id != channel.member_id:
                await fetch_active(self.db, Member, member_id, label="Member")
            await self._ensure_unique(member_id, channel.subscriber_member_id, channel_type, exclude_id=channel.id)

        old_values, new_values = merge_fields(channel, changes)
        await flush_or_conflict(self.db, "A channel of this type already exists for this member.")
        self.audit.log_update(principal.id, "notification_channel", channel.id, old_values, new_values)
        return channel

    async def delete_channel(self, channel_id: uuid.UUID, principal: Principal) -> NotificationChannel:
        channel = await self.get_channel(channel_id, principal)
        soft_delete(channel)
        await self.db.flush()
        self.audit.log_delete(principal.id, "notification_channel", channel.id)
        return channel
