"""Comment reaction endpoints."""

import uuid

from fastapi import APIRouter, status

from discuss_board.config import settings
from discuss_board.core.deps import CurrentPrincipal, DbSession, MemberPrincipal
from discuss_board.core.pagination import envelope, resolve_window
from discuss_board.schemas.comment import (
    ReactionCreate,
    ReactionListRequest,
    ReactionRead,
    ReactionUpdate,
)
from discuss_board.schemas.common import Page
from discuss_board.services.comment import ReactionService

router = APIRouter(prefix="/comment-reactions", tags=["comment-reactions"])


@router.post("", response_model=ReactionRead, status_code=status.HTTP_201_CREATED)
async def create_reaction(data: ReactionCreate, db: DbSession, principal: MemberPrincipal):
    svc = ReactionService(db)
    return ReactionRead.model_validate(await svc.create_reaction(data, principal))


@router.patch("", response_model=Page[ReactionRead])
async def list_reactions(filters: ReactionListRequest, db: DbSession, principal: CurrentPrincipal):
    """Members see their own reactions; moderators may filter by any member."""
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = ReactionService(db)
    reactions, total = await svc.list_reactions(filters, window, principal)
    return envelope(window, total, [ReactionRead.model_validate(r) for r in reactions])


@router.get("/{reaction_id}", response_model=ReactionRead)
async def get_reaction(reaction_id: uuid.UUID, db: DbSession, principal: CurrentPrincipal):
    svc = ReactionService(db)
    return ReactionRead.model_validate(await svc.get_reaction(reaction_id, principal))


@router.put("/{reaction_id}", response_model=ReactionRead)
async def update_reaction(
    reaction_id: uuid.UUID, data: ReactionUpdate, db: DbSession, principal: CurrentPrincipal
):
    svc = ReactionService(db)
    return ReactionRead.model_validate(await svc.update_reaction(reaction_id, data, principal))


@router.delete("/{reaction_id}", response_model=ReactionRead)
async def delete_reaction(reaction_id: uuid.UUID, db: DbSession, principal: CurrentPrincipal):
    svc = ReactionService(db)
    return ReactionRead.model_validate(await svc.delete_reaction(reaction_id, principal))
