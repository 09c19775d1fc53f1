"""Post reaction endpoints."""

import uuid

from fastapi import APIRouter, status

from discuss_board.config import settings
from discuss_board.core.deps import CurrentPrincipal, DbSession, MemberPrincipal
from discuss_board.core.pagination import envelope, resolve_window
from discuss_board.schemas.common import Page
from discuss_board.schemas.post import (
    PostReactionCreate,
    PostReactionListRequest,
    PostReactionRead,
    PostReactionUpdate,
)
from discuss_board.services.post import PostReactionService

router = APIRouter(prefix="/post-reactions", tags=["post-reactions"])


@router.post("", response_model=PostReactionRead, status_code=status.HTTP_201_CREATED)
async def create_post_reaction(data: PostReactionCreate, db: DbSession, principal: MemberPrincipal):
    svc = PostReactionService(db)
    return PostReactionRead.model_validate(await svc.create_reaction(data, principal))


@router.patch("", response_model=Page[PostReactionRead])
async def list_post_reactions(filters: PostReactionListRequest, db: DbSession, principal: CurrentPrincipal):
    """Members see their own reactions; moderators may filter by any member."""
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = PostReactionService(db)
    reactions, total = await svc.list_reactions(filters, window, principal)
    return envelope(window, total, [PostReactionRead.model_validate(r) for r in reactions])


@router.get("/{reaction_id}", response_model=PostReactionRead)
async def get_post_reaction(reaction_id: uuid.UUID, db: DbSession, principal: CurrentPrincipal):
    svc = PostReactionService(db)
    return PostReactionRead.model_validate(await svc.get_reaction(reaction_id, principal))


@router.put("/{reaction_id}", response_model=PostReactionRead)
async def update_post_reaction(
    reaction_id: uuid.UUID, data: PostReactionUpdate, db: DbSession, principal: CurrentPrincipal
):
    svc = PostReactionService(db)
    return PostReactionRead.model_validate(await svc.update_reaction(reaction_id, data, principal))


@router.delete("/{reaction_id}", response_model=PostReactionRead)
async def delete_post_reaction(reaction_id: uuid.UUID, db: DbSession, principal: CurrentPrincipal):
    svc = PostReactionService(db)
    return PostReactionRead.model_validate(await svc.delete_reaction(reaction_id, principal))
