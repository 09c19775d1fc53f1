"""Authorization guard: ownership and role checks against a resolved principal.

Policy applied by every service: the target row is resolved first (absent or
soft-deleted raises ``NotFoundError``) and only then is the guard consulted,
so "not found" always takes precedence over "forbidden".
"""

import uuid
from dataclasses import dataclass

from discuss_board.core.exceptions import ForbiddenError
from discuss_board.core.filtering import Visibility
from discuss_board.models.enums import PrincipalRole

PRIVILEGED_ROLES = frozenset({PrincipalRole.MODERATOR, PrincipalRole.ADMINISTRATOR})


@dataclass(frozen=True)
class Principal:
    """The authenticated actor, resolved upstream from a verified token."""

    id: uuid.UUID
    role: PrincipalRole
    member_id: uuid.UUID | None = None

    @property
    def is_privileged(self) -> bool:
        return self.role in PRIVILEGED_ROLES

    def owns(self, owner_member_id: uuid.UUID | None) -> bool:
        return self.member_id is not None and self.member_id == owner_member_id


def require_member(principal: Principal) -> uuid.UUID:
    """Return the principal's member profile id or refuse the operation."""
    if principal.member_id is None:
        raise ForbiddenError("This operation requires a member profile.")
    return principal.member_id


def ensure_owner_or_role(
    principal: Principal,
    owner_member_id: uuid.UUID | None,
    *roles: PrincipalRole,
    message: str = "Only the owner may perform this action.",
) -> None:
    """Owners pass unconditionally; anyone else needs one of ``roles``."""
    if principal.owns(owner_member_id):
        return
    if principal.role in roles:
        return
    raise ForbiddenError(message)


def resolve_visibility(principal: Principal | None, requested: Visibility | None) -> Visibility:
    """Validate the soft-delete audit flag. Never widened implicitly."""
    if requested is None or requested == Visibility.EXCLUDE:
        return Visibility.EXCLUDE
    if principal is None or not principal.is_privileged:
        raise ForbiddenError("Only moderators and administrators may list deleted records.")
    return requested
