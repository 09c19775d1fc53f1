"""Moderation action and moderation log endpoints. Action listing uses strict paging."""

import uuid

from fastapi import APIRouter, Response, status

from discuss_board.config import settings
from discuss_board.core.deps import AdminPrincipal, CurrentPrincipal, DbSession, StaffPrincipal
from discuss_board.core.pagination import envelope, resolve_window
from discuss_board.schemas.common import Page
from discuss_board.schemas.moderation import (
    ModerationActionCreate,
    ModerationActionListRequest,
    ModerationActionRead,
    ModerationActionUpdate,
    ModerationLogCreate,
    ModerationLogListRequest,
    ModerationLogRead,
    ModerationLogUpdate,
)
from discuss_board.services.moderation import ModerationActionService, ModerationLogService

router = APIRouter(prefix="/moderation-actions", tags=["moderation-actions"])


@router.post("", response_model=ModerationActionRead, status_code=status.HTTP_201_CREATED)
async def create_action(data: ModerationActionCreate, db: DbSession, principal: StaffPrincipal):
    svc = ModerationActionService(db)
    return ModerationActionRead.model_validate(await svc.create_action(data, principal))


@router.patch("", response_model=Page[ModerationActionRead])
async def list_actions(filters: ModerationActionListRequest, db: DbSession, principal: StaffPrincipal):
    """``sort`` takes ``field:asc|desc``; page below 1 or limit out of range is a 400."""
    window = resolve_window(filters.page, filters.limit, strict=True, ceiling=settings.MAX_PAGE_LIMIT)
    svc = ModerationActionService(db)
    actions, total = await svc.list_actions(filters, window)
    return envelope(window, total, [ModerationActionRead.model_validate(a) for a in actions])


@router.get("/{action_id}", response_model=ModerationActionRead)
async def get_action(action_id: uuid.UUID, db: DbSession, principal: CurrentPrincipal):
    svc = ModerationActionService(db)
    return ModerationActionRead.model_validate(await svc.get_action(action_id, principal))


@router.put("/{action_id}", response_model=ModerationActionRead)
async def update_action(
    action_id: uuid.UUID, data: ModerationActionUpdate, db: DbSession, principal: StaffPrincipal
):
    svc = ModerationActionService(db)
    return ModerationActionRead.model_validate(await svc.update_action(action_id, data, principal))


@router.post("/{action_id}/revoke", response_model=ModerationActionRead)
async def revoke_action(action_id: uuid.UUID, db: DbSession, principal: StaffPrincipal):
    svc = ModerationActionService(db)
    return ModerationActionRead.model_validate(await svc.revoke_action(action_id, principal))


@router.delete("/{action_id}", response_model=ModerationActionRead)
async def delete_action(action_id: uuid.UUID, db: DbSession, principal: StaffPrincipal):
    svc = ModerationActionService(db)
    return ModerationActionRead.model_validate(await svc.delete_action(action_id, principal))


# --- Moderation logs ---


@router.post("/{action_id}/logs", response_model=ModerationLogRead, status_code=status.HTTP_201_CREATED)
async def create_log(action_id: uuid.UUID, data: ModerationLogCreate, db: DbSession, principal: StaffPrincipal):
    svc = ModerationLogService(db)
    return ModerationLogRead.model_validate(await svc.create_log(action_id, data, principal))


@router.patch("/{action_id}/logs", response_model=Page[ModerationLogRead])
async def list_logs(
    action_id: uuid.UUID, filters: ModerationLogListRequest, db: DbSession, principal: StaffPrincipal
):
    """Oldest first, so the entries read as a timeline."""
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = ModerationLogService(db)
    entries, total = await svc.list_logs(action_id, filters, window)
    return envelope(window, total, [ModerationLogRead.model_validate(e) for e in entries])


@router.get("/{action_id}/logs/{log_id}", response_model=ModerationLogRead)
async def get_log(action_id: uuid.UUID, log_id: uuid.UUID, db: DbSession, principal: StaffPrincipal):
    svc = ModerationLogService(db)
    return ModerationLogRead.model_validate(await svc.get_log(action_id, log_id))


@router.put("/{action_id}/logs/{log_id}", response_model=ModerationLogRead)
async def update_log(
    action_id: uuid.UUID,
    log_id: uuid.UUID,
    data: ModerationLogUpdate,
    db: DbSession,
    principal: StaffPrincipal,
):
    svc = ModerationLogService(db)
    return ModerationLogRead.model_validate(await svc.update_log(action_id, log_id, data, principal))


@router.delete("/{action_id}/logs/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
async def purge_log(action_id: uuid.UUID, log_id: uuid.UUID, db: DbSession, principal: AdminPrincipal):
    svc = ModerationLogService(db)
    await svc.purge_log(action_id, log_id, principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
