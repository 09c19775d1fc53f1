"""Async engine, session factory and declarative base."""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from discuss_board.config import settings
from discuss_board.core.exceptions import ConflictError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DATABASE_ECHO,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request: commit on success, roll back on any error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def flush_or_conflict(db: AsyncSession, message: str) -> None:
    """Flush pending writes, translating a unique-constraint race into ConflictError."""
    try:
        await db.flush()
    except IntegrityError as exc:
        logger.info("Constraint violation on flush: %s", str(exc.orig)[:300])
        raise ConflictError(message) from exc
