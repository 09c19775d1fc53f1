"""Authentication request/response schemas."""

import uuid

from pydantic import BaseModel, EmailStr, Field

from discuss_board.models.enums import ConsentAction, PrincipalRole
from discuss_board.schemas.common import IsoDateTime
from discuss_board.schemas.member import MemberRead

REQUIRED_CONSENTS = ("privacy_policy", "terms_of_service")


class ConsentInput(BaseModel):
    policy_type: str = Field(min_length=1, max_length=64)
    policy_version: str = Field(min_length=1, max_length=32)
    consent_action: ConsentAction = ConsentAction.GRANTED


class MemberJoinRequest(BaseModel):
    email: EmailStr
    # bcrypt only considers the first 72 bytes
    password: str = Field(min_length=8, max_length=72)
    display_name: str = Field(min_length=1, max_length=50)
    consents: list[ConsentInput] = Field(default_factory=list)


class AdministratorJoinRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    display_name: str = Field(min_length=1, max_length=50)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=72)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class TokenBlock(BaseModel):
    access: str
    refresh: str
    expired_at: IsoDateTime
    refreshable_until: IsoDateTime


class AuthorizedPrincipal(BaseModel):
    account_id: uuid.UUID
    role: PrincipalRole
    member: MemberRead | None
    token: TokenBlock
