"""Authentication endpoints: join, login, refresh."""

import logging

from fastapi import APIRouter, Request, status

from discuss_board.core.deps import DbSession
from discuss_board.models.enums import PrincipalRole
from discuss_board.schemas.auth import (
    AdministratorJoinRequest,
    AuthorizedPrincipal,
    LoginRequest,
    MemberJoinRequest,
    RefreshRequest,
    TokenBlock,
)
from discuss_board.schemas.member import MemberRead
from discuss_board.services.auth import Authorization, AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _client_ip(request: Request) -> str | None:
    if request.client:
        return request.client.host
    return None


def _authorized(result: Authorization) -> AuthorizedPrincipal:
    return AuthorizedPrincipal(
        account_id=result.account.id,
        role=result.role,
        member=MemberRead.model_validate(result.member) if result.member else None,
        token=TokenBlock(
            access=result.tokens.access,
            refresh=result.tokens.refresh,
            expired_at=result.tokens.expired_at,
            refreshable_until=result.tokens.refreshable_until,
        ),
    )


@router.post("/member/join", response_model=AuthorizedPrincipal, status_code=status.HTTP_201_CREATED)
async def join_member(data: MemberJoinRequest, request: Request, db: DbSession):
    """Register a member account and sign it in."""
    svc = AuthService(db)
    result = await svc.join_member(
        data, ip_address=_client_ip(request), user_agent=request.headers.get("User-Agent")
    )
    return _authorized(result)


@router.post("/administrator/join", response_model=AuthorizedPrincipal, status_code=status.HTTP_201_CREATED)
async def join_administrator(data: AdministratorJoinRequest, request: Request, db: DbSession):
    """Bootstrap the first administrator account."""
    svc = AuthService(db)
    result = await svc.join_administrator(
        data, ip_address=_client_ip(request), user_agent=request.headers.get("User-Agent")
    )
    return _authorized(result)


@router.post("/{role}/login", response_model=AuthorizedPrincipal)
async def login(role: PrincipalRole, data: LoginRequest, request: Request, db: DbSession):
    svc = AuthService(db)
    result = await svc.login(
        role,
        data.email,
        data.password,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )
    return _authorized(result)


@router.post("/{role}/refresh", response_model=AuthorizedPrincipal)
async def refresh(role: PrincipalRole, data: RefreshRequest, request: Request, db: DbSession):
    """Exchange a refresh token for a new token pair (the old refresh token stops working)."""
    svc = AuthService(db)
    result = await svc.refresh(
        role,
        data.refresh_token,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )
    return _authorized(result)
