"""Authentication service: join, login, refresh-token rotation."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

import jwt
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from discuss_board.config import settings
from discuss_board.core.exceptions import (
    ConflictError,
    ForbiddenError,
    UnauthenticatedError,
    ValidationError,
)
from discuss_board.core.filtering import as_utc
from discuss_board.core.security import (
    ACCESS,
    REFRESH,
    create_token,
    decode_token,
    hash_password,
    hash_token,
    token_matches,
    verify_password,
)
from discuss_board.database import flush_or_conflict
from discuss_board.models.account import (
    Administrator,
    ConsentRecord,
    JwtSession,
    Member,
    Moderator,
    UserAccount,
)
from discuss_board.models.base import utcnow
from discuss_board.models.enums import AccountStatus, AuditAction, ConsentAction, PrincipalRole
from discuss_board.schemas.auth import (
    REQUIRED_CONSENTS,
    AdministratorJoinRequest,
    MemberJoinRequest,
)
from discuss_board.services.audit import AuditService

logger = logging.getLogger(__name__)


@dataclass
class IssuedTokens:
    access: str
    refresh: str
    expired_at: datetime
    refreshable_until: datetime


@dataclass
class Authorization:
    account: UserAccount
    role: PrincipalRole
    member: Member | None
    tokens: IssuedTokens


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    # --- Join ---

    async def join_member(
        self,
        data: MemberJoinRequest,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Authorization:
        granted = {
            c.policy_type for c in data.consents if c.consent_action == ConsentAction.GRANTED
        }
        missing = [policy for policy in REQUIRED_CONSENTS if policy not in granted]
        if missing:
            raise ValidationError(
                "Required policies must be accepted.",
                details=[{"field": "consents", "message": f"missing consent: {p}"} for p in missing],
            )

        account, member = await self._create_account(data.email, data.password, data.display_name)
        for consent in data.consents:
            self.db.add(ConsentRecord(
                id=uuid.uuid4(),
                user_account_id=account.id,
                policy_type=consent.policy_type,
                policy_version=consent.policy_version,
                consent_action=consent.consent_action,
            ))

        tokens = await self._issue(account, PrincipalRole.MEMBER, member.id, ip_address, user_agent)
        return Authorization(account, PrincipalRole.MEMBER, member, tokens)

    async def join_administrator(
        self,
        data: AdministratorJoinRequest,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Authorization:
        """Bootstrap the first administrator. Closed once an active one exists."""
        existing = await self.db.execute(
            select(func.count(Administrator.id)).where(
                Administrator.is_active == True,  # noqa: E712
                Administrator.deleted_at.is_(None),
            )
        )
        if existing.scalar_one() > 0:
            raise ForbiddenError("Administrator registration is closed.")

        account, member = await self._create_account(data.email, data.password, data.display_name)
        grant = Administrator(
            id=uuid.uuid4(),
            user_account_id=account.id,
            granted_at=utcnow(),
            is_active=True,
        )
        self.db.add(grant)
        await flush_or_conflict(self.db, "Administrator already exists.")
        self.audit.log_create(account.id, "administrator", grant.id, {"user_account_id": str(account.id)})

        tokens = await self._issue(account, PrincipalRole.ADMINISTRATOR, member.id, ip_address, user_agent)
        return Authorization(account, PrincipalRole.ADMINISTRATOR, member, tokens)

    async def _create_account(
        self, email: str, password: str, display_name: str
    ) -> tuple[UserAccount, Member]:
        email = email.lower()
        taken = await self.db.execute(
            select(UserAccount.id).where(
                func.lower(UserAccount.email) == email,
                UserAccount.deleted_at.is_(None),
            )
        )
        if taken.scalar_one_or_none() is not None:
            raise ConflictError("An account with this email already exists.")

        name_taken = await self.db.execute(
            select(Member.id).where(
                Member.display_name == display_name,
                Member.deleted_at.is_(None),
            )
        )
        if name_taken.scalar_one_or_none() is not None:
            raise ConflictError("Display name is already taken.")

        account = UserAccount(
            id=uuid.uuid4(),
            email=email,
            password_hash=hash_password(password),
            email_verified=False,
            status=AccountStatus.ACTIVE,
        )
        self.db.add(account)
        await flush_or_conflict(self.db, "An account with this email already exists.")

        member = Member(
            id=uuid.uuid4(),
            user_account_id=account.id,
            display_name=display_name,
        )
        self.db.add(member)
        await flush_or_conflict(self.db, "Display name is already taken.")

        self.audit.log_create(account.id, "user_account", account.id, {"email": email})
        self.audit.log_create(account.id, "member", member.id, {"display_name": display_name})
        return account, member

    # --- Login / refresh ---

    async def login(
        self,
        role: PrincipalRole,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Authorization:
        result = await self.db.execute(
            select(UserAccount).where(
                func.lower(UserAccount.email) == email.lower(),
                UserAccount.deleted_at.is_(None),
            )
        )
        account = result.scalar_one_or_none()
        if account is None or not verify_password(password, account.password_hash):
            raise UnauthenticatedError("Invalid email or password.")
        if account.status != AccountStatus.ACTIVE:
            raise ForbiddenError(f"Account is {account.status.value}.")

        member = await self._check_role(account.id, role)

        account.last_login_at = utcnow()
        tokens = await self._issue(account, role, member.id if member else None, ip_address, user_agent)
        self.audit.log(
            actor_id=account.id,
            action=AuditAction.LOGIN,
            entity_type=role.value,
            entity_id=account.id,
            ip_address=ip_address,
        )
        return Authorization(account, role, member, tokens)

    async def refresh(
        self,
        role: PrincipalRole,
        refresh_token: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Authorization:
        """Validate a refresh token against its session and rotate both."""
        try:
            payload = decode_token(refresh_token, REFRESH)
        except jwt.ExpiredSignatureError:
            raise UnauthenticatedError("Refresh token expired. Please log in again.")
        except jwt.PyJWTError:
            raise UnauthenticatedError("Invalid refresh token.")
        if payload.get("type") != role.value:
            raise UnauthenticatedError("Refresh token was issued for another role.")

        result = await self.db.execute(
            select(JwtSession).where(JwtSession.jwt_id == payload["jti"])
        )
        session = result.scalar_one_or_none()
        if session is None or not token_matches(refresh_token, session.refresh_token_hash):
            raise UnauthenticatedError("Invalid refresh token.")
        now = utcnow()
        if session.revoked_at is not None or as_utc(session.expires_at) <= now:
            raise UnauthenticatedError("Session is no longer valid.")

        account_result = await self.db.execute(
            select(UserAccount).where(
                UserAccount.id == session.user_account_id,
                UserAccount.deleted_at.is_(None),
            )
        )
        account = account_result.scalar_one_or_none()
        if account is None:
            raise UnauthenticatedError("Account not found.")
        if account.status != AccountStatus.ACTIVE:
            raise ForbiddenError(f"Account is {account.status.value}.")

        member = await self._check_role(account.id, role)
        member_id = member.id if member else None

        jwt_id = uuid.uuid4().hex
        access, access_exp = create_token(
            account.id, role, token_use=ACCESS, jwt_id=uuid.uuid4().hex, member_id=member_id
        )
        refresh, refresh_exp = create_token(
            account.id, role, token_use=REFRESH, jwt_id=jwt_id, member_id=member_id
        )
        session.jwt_id = jwt_id
        session.refresh_token_hash = hash_token(refresh)
        session.issued_at = now
        session.expires_at = refresh_exp
        session.ip_address = ip_address
        session.user_agent = user_agent
        session.updated_at = now
        logger.info("Rotated refresh session %s for account %s", session.id, account.id)

        return Authorization(account, role, member, IssuedTokens(access, refresh, access_exp, refresh_exp))

    async def _check_role(self, account_id: uuid.UUID, role: PrincipalRole) -> Member | None:
        """Require a live grant for ``role``; return the account's member profile."""
        if role == PrincipalRole.MODERATOR:
            grant = await self.db.execute(
                select(Moderator.id).where(
                    Moderator.user_account_id == account_id,
                    Moderator.is_active == True,  # noqa: E712
                    Moderator.deleted_at.is_(None),
                )
            )
            if grant.scalar_one_or_none() is None:
                raise ForbiddenError("Account does not hold an active moderator role.")
        elif role == PrincipalRole.ADMINISTRATOR:
            grant = await self.db.execute(
                select(Administrator.id).where(
                    Administrator.user_account_id == account_id,
                    Administrator.is_active == True,  # noqa: E712
                    Administrator.deleted_at.is_(None),
                )
            )
            if grant.scalar_one_or_none() is None:
                raise ForbiddenError("Account does not hold an active administrator role.")

        result = await self.db.execute(
            select(Member).where(
                Member.user_account_id == account_id,
                Member.deleted_at.is_(None),
            )
        )
        member = result.scalar_one_or_none()
        if member is None and role == PrincipalRole.MEMBER:
            raise ForbiddenError("Member profile has been removed.")
        return member

    async def _issue(
        self,
        account: UserAccount,
        role: PrincipalRole,
        member_id: uuid.UUID | None,
        ip_address: str | None,
        user_agent: str | None,
    ) -> IssuedTokens:
        jwt_id = uuid.uuid4().hex
        access, access_exp = create_token(
            account.id, role, token_use=ACCESS, jwt_id=uuid.uuid4().hex, member_id=member_id
        )
        refresh, refresh_exp = create_token(
            account.id, role, token_use=REFRESH, jwt_id=jwt_id, member_id=member_id,
            expires_delta=timedelta(days=settings.REFRESH_TOKEN_EXPIRY_DAYS),
        )
        self.db.add(JwtSession(
            id=uuid.uuid4(),
            user_account_id=account.id,
            jwt_id=jwt_id,
            role=role,
            refresh_token_hash=hash_token(refresh),
            user_agent=user_agent,
            ip_address=ip_address,
            issued_at=utcnow(),
            expires_at=refresh_exp,
        ))
        await self.db.flush()
        return IssuedTokens(access, refresh, access_exp, refresh_exp)
