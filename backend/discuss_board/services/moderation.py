"""Content reports, moderation actions, moderation logs, and appeals.

Reports and actions carry a discriminated target: ``content_type`` names
the one target column that must be populated, all others must be empty.
"""

import enum
import logging
import uuid

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from discuss_board.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from discuss_board.core.filtering import Contains, Equals, FilterSet, Range, as_utc
from discuss_board.core.guard import Principal, ensure_owner_or_role
from discuss_board.core.mutation import (
    fetch_active,
    merge_fields,
    snapshot,
    soft_delete,
    supplied_fields,
)
from discuss_board.core.pagination import PageWindow, paginate
from discuss_board.core.sorting import parse_sort
from discuss_board.database import flush_or_conflict
from discuss_board.models.account import Member
from discuss_board.models.base import utcnow
from discuss_board.models.content import Comment, Post
from discuss_board.models.enums import (
    AppealStatus,
    ModerationActionStatus,
    ModerationLogEvent,
    ModerationTarget,
    NotificationType,
    ReportContentType,
    ReportStatus,
)
from discuss_board.models.moderation import Appeal, ContentReport, ModerationAction, ModerationLog
from discuss_board.schemas.moderation import (
    AppealCreate,
    AppealListRequest,
    AppealUpdate,
    ModerationActionCreate,
    ModerationActionListRequest,
    ModerationActionUpdate,
    ModerationLogCreate,
    ModerationLogListRequest,
    ModerationLogUpdate,
    ReportCreate,
    ReportListRequest,
    ReportUpdate,
)
from discuss_board.services.audit import AuditService
from discuss_board.services.notification import NotificationService
from discuss_board.services.post import STAFF, active_member, visible_post

logger = logging.getLogger(__name__)


def _require_single_target(content_type: str, targets: dict[str, uuid.UUID | None]) -> uuid.UUID:
    """Exactly the target matching the discriminator may be set."""
    expected = next(field for field in targets if field.endswith(f"{content_type}_id"))
    present = [field for field, value in targets.items() if value is not None]
    if present != [expected]:
        raise ValidationError(
            f"content_type '{content_type}' requires {expected} and no other target.",
            details=[{"field": field, "message": "must not be set"} for field in present if field != expected]
            or [{"field": expected, "message": "is required"}],
        )
    return targets[expected]  # type: ignore[return-value]


async def _account_of_member(db: AsyncSession, member_id: uuid.UUID) -> uuid.UUID | None:
    result = await db.execute(select(Member.user_account_id).where(Member.id == member_id))
    return result.scalar_one_or_none()


async def affected_member_id(db: AsyncSession, action: ModerationAction) -> uuid.UUID | None:
    """The member an action is aimed at: the target member, or the author
    of the targeted post or comment (removed content included)."""
    if action.target_member_id is not None:
        return action.target_member_id
    if action.target_post_id is not None:
        result = await db.execute(select(Post.author_member_id).where(Post.id == action.target_post_id))
        return result.scalar_one_or_none()
    if action.target_comment_id is not None:
        result = await db.execute(
            select(Comment.author_member_id).where(Comment.id == action.target_comment_id)
        )
        return result.scalar_one_or_none()
    return None


# --- Content reports ---

REPORT_TRANSITIONS: dict[ReportStatus, set[ReportStatus]] = {
    ReportStatus.PENDING: {ReportStatus.UNDER_REVIEW, ReportStatus.RESOLVED, ReportStatus.DISMISSED},
    ReportStatus.UNDER_REVIEW: {ReportStatus.RESOLVED, ReportStatus.DISMISSED},
    ReportStatus.RESOLVED: set(),
    ReportStatus.DISMISSED: set(),
}

REPORT_FILTERS = FilterSet(
    Equals("status", ContentReport.status),
    Equals("content_type", ContentReport.content_type),
    Equals("reporter_member_id", ContentReport.reporter_member_id),
    Contains("search", ContentReport.reason),
    Range("created_from", "created_to", ContentReport.created_at),
)


class ReportService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)
        self.notifications = NotificationService(db)

    async def create_report(self, data: ReportCreate, principal: Principal) -> ContentReport:
        member = await active_member(self.db, principal)
        target_id = _require_single_target(
            data.content_type.value,
            {"content_post_id": data.content_post_id, "content_comment_id": data.content_comment_id},
        )
        if data.content_type == ReportContentType.POST:
            await visible_post(self.db, target_id, principal)
            target_column = ContentReport.content_post_id
        else:
            comment = await fetch_active(self.db, Comment, target_id, label="Comment")
            await visible_post(self.db, comment.post_id, principal)
            target_column = ContentReport.content_comment_id

        existing = await self.db.execute(
            select(ContentReport.id).where(
                ContentReport.reporter_member_id == member.id,
                target_column == target_id,
                ContentReport.deleted_at.is_(None),
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("You have already reported this content.")

        report = ContentReport(
            id=uuid.uuid4(),
            reporter_member_id=member.id,
            content_type=data.content_type,
            content_post_id=data.content_post_id,
            content_comment_id=data.content_comment_id,
            reason=data.reason,
            status=ReportStatus.PENDING,
        )
        self.db.add(report)
        await flush_or_conflict(self.db, "You have already reported this content.")
        self.audit.log_create(
            principal.id, "content_report", report.id,
            snapshot(report, "content_type", "content_post_id", "content_comment_id"),
        )
        return report

    async def list_reports(
        self, request: ReportListRequest, window: PageWindow
    ) -> tuple[list[ContentReport], int]:
        query = (
            select(ContentReport)
            .where(and_(ContentReport.deleted_at.is_(None), *REPORT_FILTERS.build(request)))
            .order_by(ContentReport.created_at.desc(), ContentReport.id.desc())
        )
        return await paginate(self.db, query, window)

    async def get_report(self, report_id: uuid.UUID, principal: Principal) -> ContentReport:
        report = await fetch_active(self.db, ContentReport, report_id, label="Report")
        ensure_owner_or_role(
            principal, report.reporter_member_id, *STAFF,
            message="Only the reporter or a moderator may view this report.",
        )
        return report

    async def update_report(
        self, report_id: uuid.UUID, data: ReportUpdate, principal: Principal
    ) -> ContentReport:
        report = await fetch_active(self.db, ContentReport, report_id, label="Report")
        changes = supplied_fields(data, "status")

        if "status" in changes and changes["status"] != report.status:
            if changes["status"] not in REPORT_TRANSITIONS[report.status]:
                raise ConflictError(
                    f"Cannot move report from {report.status.value} to {changes['status'].value}."
                )
            if report.status == ReportStatus.PENDING:
                changes["reviewed_at"] = utcnow()
        if changes.get("moderation_action_id") is not None:
            await fetch_active(self.db, ModerationAction, changes["moderation_action_id"], label="Moderation action")

        old_values, new_values = merge_fields(report, changes)
        await self.db.flush()
        self.audit.log_update(principal.id, "content_report", report.id, old_values, new_values)

        if "status" in new_values:
            recipient = await _account_of_member(self.db, report.reporter_member_id)
            if recipient is not None:
                self.notifications.notify(
                    recipient,
                    NotificationType.REPORT_UPDATE,
                    "Your report was updated",
                    f"Your report is now {report.status.value}.",
                    entity_type="content_report",
                    entity_id=report.id,
                )
        return report

    async def delete_report(self, report_id: uuid.UUID, principal: Principal) -> ContentReport:
        report = await fetch_active(self.db, ContentReport, report_id, label="Report")
        ensure_owner_or_role(
            principal, report.reporter_member_id, *STAFF,
            message="Only the reporter or a moderator may withdraw this report.",
        )
        if principal.role not in STAFF and report.status != ReportStatus.PENDING:
            raise ConflictError("Only pending reports can be withdrawn.")
        soft_delete(report)
        await self.db.flush()
        self.audit.log_delete(principal.id, "content_report", report.id)
        return report


# --- Moderation actions ---

def record_event(
    db: AsyncSession,
    action_id: uuid.UUID,
    actor_id: uuid.UUID,
    event: ModerationLogEvent,
    details: str | None = None,
) -> ModerationLog:
    """Append a timeline entry to a moderation action in the current transaction."""
    entry = ModerationLog(
        id=uuid.uuid4(),
        moderation_action_id=action_id,
        actor_account_id=actor_id,
        event_type=event,
        event_details=details,
    )
    db.add(entry)
    return entry


class ModerationActionSort(str, enum.Enum):
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    ACTION_TYPE = "action_type"
    STATUS = "status"


ACTION_SORT_COLUMNS = {
    ModerationActionSort.CREATED_AT: ModerationAction.created_at,
    ModerationActionSort.UPDATED_AT: ModerationAction.updated_at,
    ModerationActionSort.ACTION_TYPE: ModerationAction.action_type,
    ModerationActionSort.STATUS: ModerationAction.status,
}

ACTION_FILTERS = FilterSet(
    Equals("moderator_account_id", ModerationAction.moderator_account_id),
    Equals("target_member_id", ModerationAction.target_member_id, nullable=True),
    Equals("target_post_id", ModerationAction.target_post_id, nullable=True),
    Equals("target_comment_id", ModerationAction.target_comment_id, nullable=True),
    Equals("action_type", ModerationAction.action_type),
    Equals("status", ModerationAction.status),
    Range("created_at_from", "created_at_to", ModerationAction.created_at),
)


class ModerationActionService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)
        self.notifications = NotificationService(db)

    async def create_action(
        self, data: ModerationActionCreate, principal: Principal
    ) -> ModerationAction:
        target_id = _require_single_target(
            data.content_type.value,
            {
                "target_member_id": data.target_member_id,
                "target_post_id": data.target_post_id,
                "target_comment_id": data.target_comment_id,
            },
        )
        target_model = {
            ModerationTarget.MEMBER: Member,
            ModerationTarget.POST: Post,
            ModerationTarget.COMMENT: Comment,
        }[data.content_type]
        await fetch_active(self.db, target_model, target_id, label=data.content_type.value.capitalize())

        effective_from = data.effective_from or utcnow()
        if data.effective_until is not None and data.effective_until <= effective_from:
            raise ValidationError("effective_until must be after effective_from.")

        action = ModerationAction(
            id=uuid.uuid4(),
            moderator_account_id=principal.id,
            content_type=data.content_type,
            target_member_id=data.target_member_id,
            target_post_id=data.target_post_id,
            target_comment_id=data.target_comment_id,
            action_type=data.action_type,
            action_reason=data.action_reason,
            details=data.details,
            status=ModerationActionStatus.ACTIVE,
            effective_from=effective_from,
            effective_until=data.effective_until,
        )
        self.db.add(action)
        await self.db.flush()
        self.audit.log_create(
            principal.id, "moderation_action", action.id,
            snapshot(action, "content_type", "action_type", "target_member_id", "target_post_id", "target_comment_id"),
        )
        record_event(
            self.db, action.id, principal.id, ModerationLogEvent.ACTION_TAKEN,
            f"{action.action_type.value} on {action.content_type.value}",
        )

        member_id = await affected_member_id(self.db, action)
        recipient = await _account_of_member(self.db, member_id) if member_id else None
        if recipient is not None:
            self.notifications.notify(
                recipient,
                NotificationType.MODERATION_ACTION,
                f"Moderation action: {action.action_type.value}",
                action.action_reason,
                entity_type="moderation_action",
                entity_id=action.id,
            )
        return action

    async def list_actions(
        self, request: ModerationActionListRequest, window: PageWindow
    ) -> tuple[list[ModerationAction], int]:
        sort = parse_sort(request.sort, ModerationActionSort, ModerationActionSort.CREATED_AT)
        query = (
            select(ModerationAction)
            .where(and_(ModerationAction.deleted_at.is_(None), *ACTION_FILTERS.build(request)))
            .order_by(*sort.order_by(ACTION_SORT_COLUMNS, ModerationAction.id))
        )
        return await paginate(self.db, query, window)

    async def get_action(self, action_id: uuid.UUID, principal: Principal) -> ModerationAction:
        action = await fetch_active(self.db, ModerationAction, action_id, label="Moderation action")
        if principal.role not in STAFF:
            if principal.member_id is None or await affected_member_id(self.db, action) != principal.member_id:
                raise ForbiddenError("You may only view moderation actions that concern you.")
        return action

    async def update_action(
        self, action_id: uuid.UUID, data: ModerationActionUpdate, principal: Principal
    ) -> ModerationAction:
        action = await fetch_active(self.db, ModerationAction, action_id, label="Moderation action")
        changes = supplied_fields(data, "action_reason", "status")

        new_status = changes.get("status")
        if new_status is not None and new_status != action.status:
            if new_status == ModerationActionStatus.REVOKED:
                raise ValidationError("Use the revoke operation to revoke an action.")
            if action.status != ModerationActionStatus.ACTIVE:
                raise ConflictError(f"Action is already {action.status.value}.")
        if changes.get("effective_until") is not None:
            if changes["effective_until"] <= as_utc(action.effective_from):
                raise ValidationError("effective_until must be after effective_from.")

        old_values, new_values = merge_fields(action, changes)
        if "status" in new_values:
            record_event(
                self.db, action.id, principal.id, ModerationLogEvent.STATUS_UPDATE,
                f"{old_values['status']} -> {new_values['status']}",
            )
        await self.db.flush()
        self.audit.log_update(principal.id, "moderation_action", action.id, old_values, new_values)
        return action

    async def revoke_action(self, action_id: uuid.UUID, principal: Principal) -> ModerationAction:
        action = await fetch_active(self.db, ModerationAction, action_id, label="Moderation action")
        if action.status == ModerationActionStatus.REVOKED:
            raise ConflictError("Action has already been revoked.")
        if action.status != ModerationActionStatus.ACTIVE:
            raise ConflictError(f"Only active actions can be revoked; this one is {action.status.value}.")

        now = utcnow()
        old_values, new_values = merge_fields(
            action, {"status": ModerationActionStatus.REVOKED, "revoked_at": now}
        )
        record_event(self.db, action.id, principal.id, ModerationLogEvent.STATUS_UPDATE, "active -> revoked")
        await self.db.flush()
        self.audit.log_update(principal.id, "moderation_action", action.id, old_values, new_values)
        return action

    async def delete_action(self, action_id: uuid.UUID, principal: Principal) -> ModerationAction:
        action = await fetch_active(self.db, ModerationAction, action_id, label="Moderation action")
        soft_delete(action)
        await self.db.flush()
        self.audit.log_delete(principal.id, "moderation_action", action.id)
        return action


# --- Moderation logs ---

MODERATION_LOG_FILTERS = FilterSet(
    Equals("event_type", ModerationLog.event_type),
    Equals("actor_account_id", ModerationLog.actor_account_id),
    Contains("keyword", ModerationLog.event_details),
    Range("created_from", "created_to", ModerationLog.created_at),
)


class ModerationLogService:
    """Timeline entries under one moderation action. Entries are purged, not soft-deleted."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def _entry(self, action_id: uuid.UUID, log_id: uuid.UUID) -> ModerationLog:
        await fetch_active(self.db, ModerationAction, action_id, label="Moderation action")
        result = await self.db.execute(
            select(ModerationLog).where(
                ModerationLog.id == log_id,
                ModerationLog.moderation_action_id == action_id,
            )
        )
        entry = result.scalar_one_or_none()
        if entry is None:
            raise NotFoundError("Moderation log not found.")
        return entry

    async def create_log(
        self, action_id: uuid.UUID, data: ModerationLogCreate, principal: Principal
    ) -> ModerationLog:
        action = await fetch_active(self.db, ModerationAction, action_id, label="Moderation action")
        entry = record_event(self.db, action.id, principal.id, data.event_type, data.event_details)
        await self.db.flush()
        self.audit.log_create(
            principal.id, "moderation_log", entry.id, snapshot(entry, "moderation_action_id", "event_type")
        )
        return entry

    async def list_logs(
        self, action_id: uuid.UUID, request: ModerationLogListRequest, window: PageWindow
    ) -> tuple[list[ModerationLog], int]:
        await fetch_active(self.db, ModerationAction, action_id, label="Moderation action")
        query = (
            select(ModerationLog)
            .where(and_(ModerationLog.moderation_action_id == action_id, *MODERATION_LOG_FILTERS.build(request)))
            .order_by(ModerationLog.created_at.asc(), ModerationLog.id.asc())
        )
        return await paginate(self.db, query, window)

    async def get_log(self, action_id: uuid.UUID, log_id: uuid.UUID) -> ModerationLog:
        return await self._entry(action_id, log_id)

    async def update_log(
        self, action_id: uuid.UUID, log_id: uuid.UUID, data: ModerationLogUpdate, principal: Principal
    ) -> ModerationLog:
        entry = await self._entry(action_id, log_id)
        old_values, new_values = merge_fields(entry, supplied_fields(data, "event_type"))
        await self.db.flush()
        self.audit.log_update(principal.id, "moderation_log", entry.id, old_values, new_values)
        return entry

    async def purge_log(self, action_id: uuid.UUID, log_id: uuid.UUID, principal: Principal) -> None:
        entry = await self._entry(action_id, log_id)
        old_values = snapshot(entry, "moderation_action_id", "event_type", "event_details")
        await self.db.delete(entry)
        await self.db.flush()
        self.audit.log_delete(principal.id, "moderation_log", log_id, purge=True, old_values=old_values)


# --- Appeals ---

CLOSED_APPEAL_STATES = {AppealStatus.ACCEPTED, AppealStatus.REJECTED, AppealStatus.WITHDRAWN}
STAFF_APPEAL_STATES = {AppealStatus.UNDER_REVIEW, AppealStatus.ACCEPTED, AppealStatus.REJECTED}

APPEAL_FILTERS = FilterSet(
    Equals("status", Appeal.status),
    Equals("moderation_action_id", Appeal.moderation_action_id),
)


class AppealService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)
        self.notifications = NotificationService(db)

    async def create_appeal(self, data: AppealCreate, principal: Principal) -> Appeal:
        # Every precondition runs before the single insert
        member = await active_member(self.db, principal)
        action = await fetch_active(self.db, ModerationAction, data.moderation_action_id, label="Moderation action")
        if await affected_member_id(self.db, action) != member.id:
            raise ForbiddenError("You can only appeal moderation actions that target you.")

        existing = await self.db.execute(
            select(Appeal.id).where(
                Appeal.moderation_action_id == action.id,
                Appeal.appellant_member_id == member.id,
                Appeal.deleted_at.is_(None),
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("You have already appealed this action.")

        appeal = Appeal(
            id=uuid.uuid4(),
            moderation_action_id=action.id,
            appellant_member_id=member.id,
            appeal_rationale=data.appeal_rationale,
            status=AppealStatus.PENDING,
        )
        self.db.add(appeal)
        await flush_or_conflict(self.db, "You have already appealed this action.")
        self.audit.log_create(principal.id, "appeal", appeal.id, snapshot(appeal, "moderation_action_id"))
        return appeal

    async def list_appeals(
        self, request: AppealListRequest, window: PageWindow, principal: Principal
    ) -> tuple[list[Appeal], int]:
        clauses = [Appeal.deleted_at.is_(None), *APPEAL_FILTERS.build(request)]
        if principal.role in STAFF:
            if request.appellant_member_id is not None:
                clauses.append(Appeal.appellant_member_id == request.appellant_member_id)
        else:
            clauses.append(Appeal.appellant_member_id == principal.member_id)
        query = (
            select(Appeal)
            .where(and_(*clauses))
            .order_by(Appeal.created_at.desc(), Appeal.id.desc())
        )
        return await paginate(self.db, query, window)

    async def get_appeal(self, appeal_id: uuid.UUID, principal: Principal) -> Appeal:
        appeal = await fetch_active(self.db, Appeal, appeal_id, label="Appeal")
        ensure_owner_or_role(
            principal, appeal.appellant_member_id, *STAFF,
            message="Only the appellant or a moderator may view this appeal.",
        )
        return appeal

    async def update_appeal(self, appeal_id: uuid.UUID, data: AppealUpdate, principal: Principal) -> Appeal:
        appeal = await self.get_appeal(appeal_id, principal)
        if appeal.status in CLOSED_APPEAL_STATES:
            raise ConflictError(f"Appeal is {appeal.status.value} and can no longer change.")

        changes = supplied_fields(data, "appeal_rationale", "status")
        if principal.role in STAFF:
            if "appeal_rationale" in changes:
                raise ForbiddenError("Only the appellant may edit the rationale.")
            status = changes.get("status")
            if status is not None and status != appeal.status and status not in STAFF_APPEAL_STATES:
                raise ValidationError(f"Moderators cannot set an appeal to {status.value}.")
            if status in (AppealStatus.ACCEPTED, AppealStatus.REJECTED):
                changes["resolved_at"] = utcnow()
                changes["resolved_by_account_id"] = principal.id
        else:
            if "resolution_notes" in changes:
                raise ForbiddenError("Only moderators may write resolution notes.")
            status = changes.get("status")
            if status is not None and status not in (AppealStatus.WITHDRAWN, appeal.status):
                raise ForbiddenError("Appellants may only withdraw an appeal.")
            if "appeal_rationale" in changes and appeal.status != AppealStatus.PENDING:
                raise ConflictError("The rationale can only be edited while the appeal is pending.")

        old_values, new_values = merge_fields(appeal, changes)
        await self.db.flush()
        self.audit.log_update(principal.id, "appeal", appeal.id, old_values, new_values)

        if principal.role in STAFF and "status" in new_values:
            recipient = await _account_of_member(self.db, appeal.appellant_member_id)
            if recipient is not None:
                self.notifications.notify(
                    recipient,
                    NotificationType.APPEAL_UPDATE,
                    "Your appeal was updated",
                    appeal.resolution_notes or f"Your appeal is now {appeal.status.value}.",
                    entity_type="appeal",
                    entity_id=appeal.id,
                )
        return appeal

    async def delete_appeal(self, appeal_id: uuid.UUID, principal: Principal) -> Appeal:
        appeal = await fetch_active(self.db, Appeal, appeal_id, label="Appeal")
        soft_delete(appeal)
        await self.db.flush()
        self.audit.log_delete(principal.id, "appeal", appeal.id)
        return appeal
