"""Role grant and audit log schemas for administrator endpoints."""

import uuid

from pydantic import BaseModel

from discuss_board.models.enums import AuditAction
from discuss_board.schemas.common import IsoDateTime, ListRequest, UtcDateTime


class ModeratorGrant(BaseModel):
    account_id: uuid.UUID


class ModeratorListRequest(ListRequest):
    is_active: bool | None = None
    revoked: bool | None = None


class ModeratorRead(BaseModel):
    id: uuid.UUID
    user_account_id: uuid.UUID
    assigned_at: IsoDateTime
    revoked_at: IsoDateTime | None
    is_active: bool
    assigned_by_account_id: uuid.UUID | None
    created_at: IsoDateTime
    updated_at: IsoDateTime

    model_config = {"from_attributes": True}


class AuditLogListRequest(ListRequest):
    actor_account_id: uuid.UUID | None = None
    action: AuditAction | None = None
    entity_type: str | None = None
    entity_id: uuid.UUID | None = None
    created_from: UtcDateTime | None = None
    created_to: UtcDateTime | None = None


class AuditLogRead(BaseModel):
    id: uuid.UUID
    actor_account_id: uuid.UUID | None
    action: AuditAction
    entity_type: str
    entity_id: uuid.UUID | None
    old_values: dict | None
    new_values: dict | None
    ip_address: str | None
    created_at: IsoDateTime

    model_config = {"from_attributes": True}
