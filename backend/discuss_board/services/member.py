"""Member profile service."""

import enum
import logging
import uuid

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from discuss_board.core.exceptions import ConflictError
from discuss_board.core.filtering import Contains, Equals, FilterSet, Range
from discuss_board.core.guard import Principal, ensure_owner_or_role
from discuss_board.core.mutation import fetch_active, merge_fields, soft_delete, supplied_fields
from discuss_board.core.pagination import PageWindow, paginate
from discuss_board.core.sorting import parse_sort
from discuss_board.database import flush_or_conflict
from discuss_board.models.account import Member
from discuss_board.models.enums import PrincipalRole
from discuss_board.schemas.member import MemberListRequest, MemberUpdate
from discuss_board.services.audit import AuditService

logger = logging.getLogger(__name__)


class MemberSort(str, enum.Enum):
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    DISPLAY_NAME = "display_name"


MEMBER_SORT_COLUMNS = {
    MemberSort.CREATED_AT: Member.created_at,
    MemberSort.UPDATED_AT: Member.updated_at,
    MemberSort.DISPLAY_NAME: Member.display_name,
}

MEMBER_FILTERS = FilterSet(
    Contains("display_name", Member.display_name),
    Equals("status", Member.status),
    Range("created_from", "created_to", Member.created_at),
)


class MemberService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def list_members(
        self, request: MemberListRequest, window: PageWindow
    ) -> tuple[list[Member], int]:
        sort = parse_sort(request.sort, MemberSort, MemberSort.CREATED_AT)
        query = (
            select(Member)
            .where(and_(Member.deleted_at.is_(None), *MEMBER_FILTERS.build(request)))
            .order_by(*sort.order_by(MEMBER_SORT_COLUMNS, Member.id))
        )
        return await paginate(self.db, query, window)

    async def get_member(self, member_id: uuid.UUID) -> Member:
        return await fetch_active(self.db, Member, member_id, label="Member")

    async def update_member(
        self, member_id: uuid.UUID, data: MemberUpdate, principal: Principal
    ) -> Member:
        member = await fetch_active(self.db, Member, member_id, label="Member")
        ensure_owner_or_role(
            principal, member.id, PrincipalRole.ADMINISTRATOR,
            message="You may only edit your own profile.",
        )

        changes = supplied_fields(data, "display_name")
        if "display_name" in changes and changes["display_name"] != member.display_name:
            taken = await self.db.execute(
                select(Member.id).where(
                    Member.display_name == changes["display_name"],
                    Member.deleted_at.is_(None),
                    Member.id != member.id,
                )
            )
            if taken.scalar_one_or_none() is not None:
                raise ConflictError("Display name is already taken.")

        old_values, new_values = merge_fields(member, changes)
        await flush_or_conflict(self.db, "Display name is already taken.")
        self.audit.log_update(principal.id, "member", member.id, old_values, new_values)
        return member

    async def delete_member(self, member_id: uuid.UUID, principal: Principal) -> Member:
        member = await fetch_active(self.db, Member, member_id, label="Member")
        ensure_owner_or_role(
            principal, member.id, PrincipalRole.ADMINISTRATOR,
            message="You may only delete your own profile.",
        )
        soft_delete(member)
        await self.db.flush()
        self.audit.log_delete(principal.id, "member", member.id)
        return member
