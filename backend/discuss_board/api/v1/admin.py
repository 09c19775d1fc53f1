"""Administrator endpoints: moderator grants and audit logs."""

import uuid

from fastapi import APIRouter

from discuss_board.config import settings
from discuss_board.core.deps import AdminPrincipal, DbSession
from discuss_board.core.pagination import envelope, resolve_window
from discuss_board.schemas.admin import (
    AuditLogListRequest,
    AuditLogRead,
    ModeratorGrant,
    ModeratorListRequest,
    ModeratorRead,
)
from discuss_board.schemas.common import Page
from discuss_board.services.admin import AuditLogService, GrantService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.put("/accounts/{account_id}/moderator", response_model=ModeratorRead)
async def grant_moderator(
    account_id: uuid.UUID, data: ModeratorGrant, db: DbSession, principal: AdminPrincipal
):
    """Grant (or re-grant) the moderator role. Idempotent for active grants."""
    svc = GrantService(db)
    return ModeratorRead.model_validate(await svc.grant_moderator(account_id, data, principal))


@router.delete("/accounts/{account_id}/moderator", response_model=ModeratorRead)
async def revoke_moderator(account_id: uuid.UUID, db: DbSession, principal: AdminPrincipal):
    svc = GrantService(db)
    return ModeratorRead.model_validate(await svc.revoke_moderator(account_id, principal))


@router.patch("/moderators", response_model=Page[ModeratorRead])
async def list_moderators(filters: ModeratorListRequest, db: DbSession, principal: AdminPrincipal):
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = GrantService(db)
    rows, total = await svc.list_moderators(filters, window)
    return envelope(window, total, [ModeratorRead.model_validate(m) for m in rows])


@router.patch("/audit-logs", response_model=Page[AuditLogRead])
async def list_audit_logs(filters: AuditLogListRequest, db: DbSession, principal: AdminPrincipal):
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = AuditLogService(db)
    rows, total = await svc.list_logs(filters, window)
    return envelope(window, total, [AuditLogRead.model_validate(log) for log in rows])
