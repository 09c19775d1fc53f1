"""Content report endpoints."""

import uuid

from fastapi import APIRouter, status

from discuss_board.config import settings
from discuss_board.core.deps import CurrentPrincipal, DbSession, MemberPrincipal, StaffPrincipal
from discuss_board.core.pagination import envelope, resolve_window
from discuss_board.schemas.common import Page
from discuss_board.schemas.moderation import ReportCreate, ReportListRequest, ReportRead, ReportUpdate
from discuss_board.services.moderation import ReportService

router = APIRouter(prefix="/content-reports", tags=["content-reports"])


@router.post("", response_model=ReportRead, status_code=status.HTTP_201_CREATED)
async def create_report(data: ReportCreate, db: DbSession, principal: MemberPrincipal):
    svc = ReportService(db)
    return ReportRead.model_validate(await svc.create_report(data, principal))


@router.patch("", response_model=Page[ReportRead])
async def list_reports(filters: ReportListRequest, db: DbSession, principal: StaffPrincipal):
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = ReportService(db)
    reports, total = await svc.list_reports(filters, window)
    return envelope(window, total, [ReportRead.model_validate(r) for r in reports])


@router.get("/{report_id}", response_model=ReportRead)
async def get_report(report_id: uuid.UUID, db: DbSession, principal: CurrentPrincipal):
    svc = ReportService(db)
    return ReportRead.model_validate(await svc.get_report(report_id, principal))


@router.put("/{report_id}", response_model=ReportRead)
async def update_report(
    report_id: uuid.UUID, data: ReportUpdate, db: DbSession, principal: StaffPrincipal
):
    """Review a report; status only moves forward."""
    svc = ReportService(db)
    return ReportRead.model_validate(await svc.update_report(report_id, data, principal))


@router.delete("/{report_id}", response_model=ReportRead)
async def delete_report(report_id: uuid.UUID, db: DbSession, principal: CurrentPrincipal):
    svc = ReportService(db)
    return ReportRead.model_validate(await svc.delete_report(report_id, principal))
