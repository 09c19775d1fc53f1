"""Audit logging service.

Provides a consistent interface for recording all mutations with
old/new value diffs, actor context, and IP address tracking.
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from discuss_board.models.audit import AuditLog
from discuss_board.models.enums import AuditAction

logger = logging.getLogger(__name__)


class AuditService:
    """Service for creating structured audit log entries."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def log(
        self,
        *,
        actor_id: uuid.UUID | None,
        action: AuditAction,
        entity_type: str,
        entity_id: uuid.UUID | None = None,
        old_values: dict | None = None,
        new_values: dict | None = None,
        ip_address: str | None = None,
    ) -> AuditLog:
        """Add an audit log entry to the current transaction.

        Args:
            actor_id: The account that performed the action (None for system actions).
            action: The type of action.
            entity_type: The type of entity affected (e.g. "post", "appeal").
            entity_id: The UUID of the affected entity.
            old_values: Previous values before mutation (for UPDATE/DELETE).
            new_values: New values after mutation (for CREATE/UPDATE).
            ip_address: Client IP address, when known.
        """
        entry = AuditLog(
            id=uuid.uuid4(),
            actor_account_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            old_values=old_values or None,
            new_values=new_values or None,
            ip_address=ip_address,
        )
        self.db.add(entry)

        logger.info(
            "AUDIT: actor=%s action=%s entity=%s/%s",
            actor_id,
            action.value,
            entity_type,
            entity_id,
        )
        return entry

    def log_create(self, actor_id, entity_type: str, entity_id, new_values: dict | None = None) -> AuditLog:
        return self.log(
            actor_id=actor_id,
            action=AuditAction.CREATE,
            entity_type=entity_type,
            entity_id=entity_id,
            new_values=new_values,
        )

    def log_update(
        self, actor_id, entity_type: str, entity_id, old_values: dict, new_values: dict
    ) -> AuditLog | None:
        """Log an UPDATE; nothing is written when no field actually changed."""
        if not new_values:
            return None
        return self.log(
            actor_id=actor_id,
            action=AuditAction.UPDATE,
            entity_type=entity_type,
            entity_id=entity_id,
            old_values=old_values,
            new_values=new_values,
        )

    def log_delete(
        self, actor_id, entity_type: str, entity_id, *, purge: bool = False, old_values: dict | None = None
    ) -> AuditLog:
        return self.log(
            actor_id=actor_id,
            action=AuditAction.PURGE if purge else AuditAction.DELETE,
            entity_type=entity_type,
            entity_id=entity_id,
            old_values=old_values,
        )
