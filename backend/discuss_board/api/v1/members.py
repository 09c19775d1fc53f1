"""Member profile endpoints."""

import uuid

from fastapi import APIRouter

from discuss_board.config import settings
from discuss_board.core.deps import CurrentPrincipal, DbSession
from discuss_board.core.pagination import envelope, resolve_window
from discuss_board.schemas.common import Page
from discuss_board.schemas.member import MemberListRequest, MemberRead, MemberSummary, MemberUpdate
from discuss_board.services.member import MemberService

router = APIRouter(prefix="/members", tags=["members"])


@router.patch("", response_model=Page[MemberSummary])
async def list_members(filters: MemberListRequest, db: DbSession, principal: CurrentPrincipal):
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = MemberService(db)
    members, total = await svc.list_members(filters, window)
    return envelope(window, total, [MemberSummary.model_validate(m) for m in members])


@router.get("/{member_id}", response_model=MemberRead)
async def get_member(member_id: uuid.UUID, db: DbSession, principal: CurrentPrincipal):
    svc = MemberService(db)
    return MemberRead.model_validate(await svc.get_member(member_id))


@router.put("/{member_id}", response_model=MemberRead)
async def update_member(
    member_id: uuid.UUID, data: MemberUpdate, db: DbSession, principal: CurrentPrincipal
):
    """Partial update: only supplied fields change."""
    svc = MemberService(db)
    return MemberRead.model_validate(await svc.update_member(member_id, data, principal))


@router.delete("/{member_id}", response_model=MemberRead)
async def delete_member(member_id: uuid.UUID, db: DbSession, principal: CurrentPrincipal):
    svc = MemberService(db)
    return MemberRead.model_validate(await svc.delete_member(member_id, principal))
