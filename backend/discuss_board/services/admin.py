"""Administrator operations: moderator grants and audit log review."""

import logging
import uuid

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from discuss_board.core.exceptions import ConflictError, NotFoundError, ValidationError
from discuss_board.core.filtering import Equals, FilterSet, IsSet, Range
from discuss_board.core.guard import Principal
from discuss_board.core.mutation import fetch_active, merge_fields
from discuss_board.core.pagination import PageWindow, paginate
from discuss_board.database import flush_or_conflict
from discuss_board.models.account import Moderator, UserAccount
from discuss_board.models.audit import AuditLog
from discuss_board.models.base import utcnow
from discuss_board.models.enums import AccountStatus
from discuss_board.schemas.admin import AuditLogListRequest, ModeratorGrant, ModeratorListRequest
from discuss_board.services.audit import AuditService

logger = logging.getLogger(__name__)

MODERATOR_FILTERS = FilterSet(
    Equals("is_active", Moderator.is_active),
    IsSet("revoked", Moderator.revoked_at),
)

AUDIT_LOG_FILTERS = FilterSet(
    Equals("actor_account_id", AuditLog.actor_account_id),
    Equals("action", AuditLog.action),
    Equals("entity_type", AuditLog.entity_type),
    Equals("entity_id", AuditLog.entity_id),
    Range("created_from", "created_to", AuditLog.created_at),
)


class GrantService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def _grant_row(self, account_id: uuid.UUID) -> Moderator | None:
        result = await self.db.execute(
            select(Moderator).where(Moderator.user_account_id == account_id)
        )
        return result.scalar_one_or_none()

    async def grant_moderator(
        self, account_id: uuid.UUID, data: ModeratorGrant, principal: Principal
    ) -> Moderator:
        if data.account_id != account_id:
            raise ValidationError("Path account id and body account_id do not match.")
        account = await fetch_active(self.db, UserAccount, account_id, label="Account")
        if account.status != AccountStatus.ACTIVE:
            raise ConflictError(f"Account is {account.status.value}; only active accounts can moderate.")

        grant = await self._grant_row(account_id)
        now = utcnow()
        if grant is None:
            grant = Moderator(
                id=uuid.uuid4(),
                user_account_id=account_id,
                assigned_at=now,
                is_active=True,
                assigned_by_account_id=principal.id,
            )
            self.db.add(grant)
            await flush_or_conflict(self.db, "Account is already a moderator.")
            self.audit.log_create(principal.id, "moderator", grant.id, {"user_account_id": str(account_id)})
            return grant

        if grant.is_active and grant.deleted_at is None:
            return grant

        # One row per account: a revoked grant is revived
        old_values, new_values = merge_fields(grant, {
            "is_active": True,
            "revoked_at": None,
            "deleted_at": None,
            "assigned_at": now,
            "assigned_by_account_id": principal.id,
        })
        await self.db.flush()
        self.audit.log_update(principal.id, "moderator", grant.id, old_values, new_values)
        return grant

    async def revoke_moderator(self, account_id: uuid.UUID, principal: Principal) -> Moderator:
        grant = await self._grant_row(account_id)
        if grant is None or grant.deleted_at is not None:
            raise NotFoundError("Account has no moderator grant.")
        if not grant.is_active:
            raise ConflictError("Moderator role has already been revoked.")

        old_values, new_values = merge_fields(grant, {"is_active": False, "revoked_at": utcnow()})
        await self.db.flush()
        self.audit.log_update(principal.id, "moderator", grant.id, old_values, new_values)
        return grant

    async def list_moderators(
        self, request: ModeratorListRequest, window: PageWindow
    ) -> tuple[list[Moderator], int]:
        query = (
            select(Moderator)
            .where(and_(Moderator.deleted_at.is_(None), *MODERATOR_FILTERS.build(request)))
            .order_by(Moderator.assigned_at.desc(), Moderator.id.desc())
        )
        return await paginate(self.db, query, window)


class AuditLogService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_logs(
        self, request: AuditLogListRequest, window: PageWindow
    ) -> tuple[list[AuditLog], int]:
        query = (
            select(AuditLog)
            .where(*AUDIT_LOG_FILTERS.build(request))
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        )
        return await paginate(self.db, query, window)
