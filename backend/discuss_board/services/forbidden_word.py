"""Forbidden words: administrator-managed expressions screened out of posts and comments."""

import logging
import uuid

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from discuss_board.core.exceptions import ConflictError, ValidationError
from discuss_board.core.filtering import Contains, FilterSet
from discuss_board.core.guard import Principal
from discuss_board.core.mutation import fetch_active, merge_fields, soft_delete, supplied_fields
from discuss_board.core.pagination import PageWindow, paginate
from discuss_board.database import flush_or_conflict
from discuss_board.models.moderation import ForbiddenWord
from discuss_board.schemas.moderation import (
    ForbiddenWordCreate,
    ForbiddenWordListRequest,
    ForbiddenWordUpdate,
)
from discuss_board.services.audit import AuditService

logger = logging.getLogger(__name__)

FORBIDDEN_WORD_FILTERS = FilterSet(
    Contains("keyword", ForbiddenWord.expression, ForbiddenWord.description),
)


async def screen_text(db: AsyncSession, fields: dict[str, str | None]) -> None:
    """Reject content that contains an active forbidden expression.

    Matching is a case-insensitive substring test; ``None`` values are skipped.
    """
    texts = {name: value.casefold() for name, value in fields.items() if value}
    if not texts:
        return
    result = await db.execute(select(ForbiddenWord.expression).where(ForbiddenWord.deleted_at.is_(None)))
    details = [
        {"field": name, "message": f"contains the forbidden expression '{expression}'"}
        for expression in result.scalars().all()
        for name, text in texts.items()
        if expression.casefold() in text
    ]
    if details:
        raise ValidationError("Content contains a forbidden expression.", details=details)


class ForbiddenWordService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def _ensure_unique(self, expression: str, exclude_id: uuid.UUID | None = None) -> None:
        query = select(ForbiddenWord.id).where(
            ForbiddenWord.expression == expression,
            ForbiddenWord.deleted_at.is_(None),
        )
        if exclude_id is not None:
            query = query.where(ForbiddenWord.id != exclude_id)
        if (await self.db.execute(query)).scalar_one_or_none() is not None:
            raise ConflictError(f"Forbidden word '{expression}' already exists.")

    async def create_word(self, data: ForbiddenWordCreate, principal: Principal) -> ForbiddenWord:
        await self._ensure_unique(data.expression)
        word = ForbiddenWord(id=uuid.uuid4(), expression=data.expression, description=data.description)
        self.db.add(word)
        await flush_or_conflict(self.db, f"Forbidden word '{data.expression}' already exists.")
        self.audit.log_create(principal.id, "forbidden_word", word.id, {"expression": word.expression})
        logger.info("Forbidden word %s added by %s", word.id, principal.id)
        return word

    async def list_words(
        self, request: ForbiddenWordListRequest, window: PageWindow
    ) -> tuple[list[ForbiddenWord], int]:
        query = (
            select(ForbiddenWord)
            .where(and_(ForbiddenWord.deleted_at.is_(None), *FORBIDDEN_WORD_FILTERS.build(request)))
            .order_by(ForbiddenWord.expression.asc(), ForbiddenWord.id.asc())
        )
        return await paginate(self.db, query, window)

    async def get_word(self, word_id: uuid.UUID) -> ForbiddenWord:
        return await fetch_active(self.db, ForbiddenWord, word_id, label="Forbidden word")

    async def update_word(
        self, word_id: uuid.UUID, data: ForbiddenWordUpdate, principal: Principal
    ) -> ForbiddenWord:
        word = await fetch_active(self.db, ForbiddenWord, word_id, label="Forbidden word")
        changes = supplied_fields(data, "expression")
        if "expression" in changes and changes["expression"] != word.expression:
            await self._ensure_unique(changes["expression"], exclude_id=word.id)

        old_values, new_values = merge_fields(word, changes)
        await flush_or_conflict(self.db, "Forbidden word already exists.")
        self.audit.log_update(principal.id, "forbidden_word", word.id, old_values, new_values)
        return word

    async def delete_word(self, word_id: uuid.UUID, principal: Principal) -> ForbiddenWord:
        word = await fetch_active(self.db, ForbiddenWord, word_id, label="Forbidden word")
        soft_delete(word)
        await self.db.flush()
        self.audit.log_delete(principal.id, "forbidden_word", word.id)
        return word
