"""Account, member profile, role grant, session, and consent models."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from discuss_board.models.base import BaseModel, BaseModelNoSoftDelete, enum_column
from discuss_board.models.enums import AccountStatus, ConsentAction, MemberStatus, PrincipalRole


class UserAccount(BaseModel):
    __tablename__ = "user_account"

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    status: Mapped[AccountStatus] = mapped_column(
        enum_column(AccountStatus), default=AccountStatus.PENDING, nullable=False
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index(
            "uq_user_account_email_active",
            "email",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )


class Member(BaseModel):
    __tablename__ = "member"

    user_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("user_account.id"), unique=True, nullable=False
    )
    display_name: Mapped[str] = mapped_column(String(50), nullable=False)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[MemberStatus] = mapped_column(
        enum_column(MemberStatus), default=MemberStatus.ACTIVE, nullable=False
    )

    __table_args__ = (
        Index(
            "uq_member_display_name_active",
            "display_name",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )


class Moderator(BaseModel):
    """Moderator role grant. One row per account, revived on re-assignment."""

    __tablename__ = "moderator"

    user_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("user_account.id"), unique=True, nullable=False
    )
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true")
    assigned_by_account_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("user_account.id"), nullable=True
    )


class Administrator(BaseModel):
    __tablename__ = "administrator"

    user_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("user_account.id"), unique=True, nullable=False
    )
    granted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true")


class JwtSession(BaseModelNoSoftDelete):
    """Refresh-token session. The refresh token itself is only stored hashed."""

    __tablename__ = "jwt_session"

    user_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("user_account.id"), nullable=False
    )
    jwt_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    role: Mapped[PrincipalRole] = mapped_column(enum_column(PrincipalRole), nullable=False)
    refresh_token_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_jwt_session_account", "user_account_id"),
    )


class ConsentRecord(BaseModelNoSoftDelete):
    __tablename__ = "consent_record"

    user_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("user_account.id"), nullable=False
    )
    policy_type: Mapped[str] = mapped_column(String(64), nullable=False)
    policy_version: Mapped[str] = mapped_column(String(32), nullable=False)
    consent_action: Mapped[ConsentAction] = mapped_column(enum_column(ConsentAction), nullable=False)

    __table_args__ = (
        Index("ix_consent_record_account", "user_account_id"),
    )
