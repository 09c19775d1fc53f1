"""Appeal endpoints."""

import uuid

from fastapi import APIRouter, status

from discuss_board.config import settings
from discuss_board.core.deps import AdminPrincipal, CurrentPrincipal, DbSession, MemberPrincipal
from discuss_board.core.pagination import envelope, resolve_window
from discuss_board.schemas.common import Page
from discuss_board.schemas.moderation import AppealCreate, AppealListRequest, AppealRead, AppealUpdate
from discuss_board.services.moderation import AppealService

router = APIRouter(prefix="/appeals", tags=["appeals"])


@router.post("", response_model=AppealRead, status_code=status.HTTP_201_CREATED)
async def create_appeal(data: AppealCreate, db: DbSession, principal: MemberPrincipal):
    svc = AppealService(db)
    return AppealRead.model_validate(await svc.create_appeal(data, principal))


@router.patch("", response_model=Page[AppealRead])
async def list_appeals(filters: AppealListRequest, db: DbSession, principal: CurrentPrincipal):
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = AppealService(db)
    appeals, total = await svc.list_appeals(filters, window, principal)
    return envelope(window, total, [AppealRead.model_validate(a) for a in appeals])


@router.get("/{appeal_id}", response_model=AppealRead)
async def get_appeal(appeal_id: uuid.UUID, db: DbSession, principal: CurrentPrincipal):
    svc = AppealService(db)
    return AppealRead.model_validate(await svc.get_appeal(appeal_id, principal))


@router.put("/{appeal_id}", response_model=AppealRead)
async def update_appeal(
    appeal_id: uuid.UUID, data: AppealUpdate, db: DbSession, principal: CurrentPrincipal
):
    svc = AppealService(db)
    return AppealRead.model_validate(await svc.update_appeal(appeal_id, data, principal))


@router.delete("/{appeal_id}", response_model=AppealRead)
async def delete_appeal(appeal_id: uuid.UUID, db: DbSession, principal: AdminPrincipal):
    svc = AppealService(db)
    return AppealRead.model_validate(await svc.delete_appeal(appeal_id, principal))
