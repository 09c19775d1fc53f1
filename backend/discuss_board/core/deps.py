"""FastAPI dependencies for auth, DB session, and RBAC."""

import uuid
from typing import Annotated

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from discuss_board.core.exceptions import ForbiddenError, UnauthenticatedError
from discuss_board.core.guard import Principal
from discuss_board.core.security import ACCESS, decode_token
from discuss_board.database import get_db
from discuss_board.models.account import Administrator, Member, Moderator, UserAccount
from discuss_board.models.enums import AccountStatus, PrincipalRole

security_scheme = HTTPBearer(auto_error=False)


async def _resolve_principal(db: AsyncSession, token: str) -> Principal:
    try:
        payload = decode_token(token, ACCESS)
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Session expired. Please log in again.")
    except jwt.PyJWTError:
        raise UnauthenticatedError("Invalid authentication token.")

    try:
        account_id = uuid.UUID(payload["sub"])
        role = PrincipalRole(payload.get("type"))
    except ValueError:
        raise UnauthenticatedError("Invalid authentication token.")

    # Check account exists and is active
    result = await db.execute(
        select(UserAccount).where(
            UserAccount.id == account_id,
            UserAccount.deleted_at.is_(None),
            UserAccount.status == AccountStatus.ACTIVE,
        )
    )
    if result.scalar_one_or_none() is None:
        raise UnauthenticatedError("Account not found or deactivated.")

    # Role grants are re-checked on every request so revocation is immediate
    if role == PrincipalRole.MODERATOR:
        grant = await db.execute(
            select(Moderator.id).where(
                Moderator.user_account_id == account_id,
                Moderator.is_active == True,  # noqa: E712
                Moderator.deleted_at.is_(None),
            )
        )
        if grant.scalar_one_or_none() is None:
            raise UnauthenticatedError("Moderator role is no longer active.")
    elif role == PrincipalRole.ADMINISTRATOR:
        grant = await db.execute(
            select(Administrator.id).where(
                Administrator.user_account_id == account_id,
                Administrator.is_active == True,  # noqa: E712
                Administrator.deleted_at.is_(None),
            )
        )
        if grant.scalar_one_or_none() is None:
            raise UnauthenticatedError("Administrator role is no longer active.")

    member_result = await db.execute(
        select(Member.id).where(
            Member.user_account_id == account_id,
            Member.deleted_at.is_(None),
        )
    )
    member_id = member_result.scalar_one_or_none()
    if member_id is None and role == PrincipalRole.MEMBER:
        raise UnauthenticatedError("Member profile not found.")

    return Principal(id=account_id, role=role, member_id=member_id)


async def get_current_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Principal:
    """Extract and validate the bearer token, return the authenticated principal."""
    if credentials is None:
        raise UnauthenticatedError("Authentication required.")
    principal = await _resolve_principal(db, credentials.credentials)
    request.state.principal = principal
    return principal


async def get_optional_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Principal | None:
    """For public endpoints: resolve a principal when a token is supplied."""
    if credentials is None:
        return None
    principal = await _resolve_principal(db, credentials.credentials)
    request.state.principal = principal
    return principal


def require_role(*allowed_roles: PrincipalRole):
    """Dependency factory: restrict endpoint to specific roles."""
    async def role_checker(
        principal: Annotated[Principal, Depends(get_current_principal)],
    ) -> Principal:
        if principal.role not in allowed_roles:
            raise ForbiddenError("You do not have permission to perform this action.")
        return principal
    return role_checker


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
OptionalPrincipal = Annotated[Principal | None, Depends(get_optional_principal)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
MemberPrincipal = Annotated[Principal, Depends(require_role(PrincipalRole.MEMBER))]
StaffPrincipal = Annotated[
    Principal,
    Depends(require_role(PrincipalRole.MODERATOR, PrincipalRole.ADMINISTRATOR)),
]
AdminPrincipal = Annotated[Principal, Depends(require_role(PrincipalRole.ADMINISTRATOR))]
