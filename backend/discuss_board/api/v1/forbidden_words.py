"""Forbidden word endpoints. Administrators manage the list; moderators may read it."""

import uuid

from fastapi import APIRouter, status

from discuss_board.config import settings
from discuss_board.core.deps import AdminPrincipal, DbSession, StaffPrincipal
from discuss_board.core.pagination import envelope, resolve_window
from discuss_board.schemas.common import Page
from discuss_board.schemas.moderation import (
    ForbiddenWordCreate,
    ForbiddenWordListRequest,
    ForbiddenWordRead,
    ForbiddenWordUpdate,
)
from discuss_board.services.forbidden_word import ForbiddenWordService

router = APIRouter(prefix="/forbidden-words", tags=["forbidden-words"])


@router.post("", response_model=ForbiddenWordRead, status_code=status.HTTP_201_CREATED)
async def create_word(data: ForbiddenWordCreate, db: DbSession, principal: AdminPrincipal):
    svc = ForbiddenWordService(db)
    return ForbiddenWordRead.model_validate(await svc.create_word(data, principal))


@router.patch("", response_model=Page[ForbiddenWordRead])
async def list_words(filters: ForbiddenWordListRequest, db: DbSession, principal: StaffPrincipal):
    window = resolve_window(filters.page, filters.limit, ceiling=settings.MAX_PAGE_LIMIT)
    svc = ForbiddenWordService(db)
    words, total = await svc.list_words(filters, window)
    return envelope(window, total, [ForbiddenWordRead.model_validate(w) for w in words])


@router.get("/{word_id}", response_model=ForbiddenWordRead)
async def get_word(word_id: uuid.UUID, db: DbSession, principal: StaffPrincipal):
    svc = ForbiddenWordService(db)
    return ForbiddenWordRead.model_validate(await svc.get_word(word_id))


@router.put("/{word_id}", response_model=ForbiddenWordRead)
async def update_word(word_id: uuid.UUID, data: ForbiddenWordUpdate, db: DbSession, principal: AdminPrincipal):
    svc = ForbiddenWordService(db)
    return ForbiddenWordRead.model_validate(await svc.update_word(word_id, data, principal))


@router.delete("/{word_id}", response_model=ForbiddenWordRead)
async def delete_word(word_id: uuid.UUID, db: DbSession, principal: AdminPrincipal):
    svc = ForbiddenWordService(db)
    return ForbiddenWordRead.model_validate(await svc.delete_word(word_id, principal))
