"""Notification and notification channel schemas."""

import uuid

from pydantic import BaseModel

from discuss_board.models.enums import ChannelType, NotificationType
from discuss_board.schemas.common import IsoDateTime, ListRequest


class NotificationListRequest(ListRequest):
    notification_type: NotificationType | None = None
    is_read: bool | None = None


class AdminNotificationListRequest(NotificationListRequest):
    recipient_account_id: uuid.UUID | None = None


class NotificationRead(BaseModel):
    id: uuid.UUID
    recipient_account_id: uuid.UUID
    notification_type: NotificationType
    title: str
    body: str
    entity_type: str | None
    entity_id: uuid.UUID | None
    is_read: bool
    read_at: IsoDateTime | None
    created_at: IsoDateTime

    model_config = {"from_attributes": True}


class ChannelCreate(BaseModel):
    member_id: uuid.UUID
    channel_type: ChannelType
    is_enabled: bool = True


class ChannelUpdate(BaseModel):
    member_id: uuid.UUID | None = None
    channel_type: ChannelType | None = None
    is_enabled: bool | None = None


class ChannelListRequest(ListRequest):
    member_id: uuid.UUID | None = None
    channel_type: ChannelType | None = None
    is_enabled: bool | None = None


class ChannelRead(BaseModel):
    id: uuid.UUID
    member_id: uuid.UUID
    subscriber_member_id: uuid.UUID
    channel_type: ChannelType
    is_enabled: bool
    created_at: IsoDateTime
    updated_at: IsoDateTime
    deleted_at: IsoDateTime | None

    model_config = {"from_attributes": True}
