"""Notification and notification channel endpoints."""

import uuid

from fastapi import APIRouter, status

from discuss_board.config import settings
from discuss_board.core.deps import AdminPrincipal, CurrentPrincipal, DbSession, MemberPrincipal
from discuss_board.core.pagination import envelope, resolve_window
from discuss_board.schemas.common import Page
from discuss_board.schemas.notification import (
    AdminNotificationListRequest,
    ChannelCreate,
    ChannelListRequest,
    ChannelRead,
    ChannelUpdate,
    NotificationListRequest,
    NotificationRead,
)
from discuss_board.services.notification import ChannelService, NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])
channels_router = APIRouter(prefix="/notification-channels", tags=["notification-channels"])
admin_router = APIRouter(prefix="/admin/notifications", tags=["admin"])


@router.patch("", response_model=Page[NotificationRead])
async def list_notifications(
    filters: NotificationListRequest, db: DbSession, principal: CurrentPrincipal
):
    """List notifications for the current account."""
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = NotificationService(db)
    rows, total = await svc.list_notifications(filters, window, recipient_account_id=principal.id)
    return envelope(window, total, [NotificationRead.model_validate(n) for n in rows])


@router.put("/{notification_id}/read", response_model=NotificationRead)
async def mark_read(notification_id: uuid.UUID, db: DbSession, principal: CurrentPrincipal):
    svc = NotificationService(db)
    return NotificationRead.model_validate(await svc.mark_read(notification_id, principal))


@router.delete("/{notification_id}", response_model=NotificationRead)
async def delete_notification(notification_id: uuid.UUID, db: DbSession, principal: CurrentPrincipal):
    svc = NotificationService(db)
    return NotificationRead.model_validate(await svc.delete_notification(notification_id, principal))


@admin_router.patch("", response_model=Page[NotificationRead])
async def list_all_notifications(
    filters: AdminNotificationListRequest, db: DbSession, principal: AdminPrincipal
):
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = NotificationService(db)
    rows, total = await svc.list_notifications(filters, window)
    return envelope(window, total, [NotificationRead.model_validate(n) for n in rows])


# --- Channels ---

@channels_router.post("", response_model=ChannelRead, status_code=status.HTTP_201_CREATED)
async def create_channel(data: ChannelCreate, db: DbSession, principal: MemberPrincipal):
    svc = ChannelService(db)
    return ChannelRead.model_validate(await svc.create_channel(data, principal))


@channels_router.patch("", response_model=Page[ChannelRead])
async def list_channels(filters: ChannelListRequest, db: DbSession, principal: CurrentPrincipal):
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = ChannelService(db)
    rows, total = await svc.list_channels(filters, window, principal)
    return envelope(window, total, [ChannelRead.model_validate(c) for c in rows])


@channels_router.get("/{channel_id}", response_model=ChannelRead)
async def get_channel(channel_id: uuid.UUID, db: DbSession, principal: CurrentPrincipal):
    svc = ChannelService(db)
    return ChannelRead.model_validate(await svc.get_channel(channel_id, principal))


@channels_router.put("/{channel_id}", response_model=ChannelRead)
async def update_channel(
    channel_id: uuid.UUID, data: ChannelUpdate, db: DbSession, principal: CurrentPrincipal
):
    svc = ChannelService(db)
    return ChannelRead.model_validate(await svc.update_channel(channel_id, data, principal))


@channels_router.delete("/{channel_id}", response_model=ChannelRead)
async def delete_channel(channel_id: uuid.UUID, db: DbSession, principal: CurrentPrincipal):
    svc = ChannelService(db)
    return ChannelRead.model_validate(await svc.delete_channel(channel_id, principal))
