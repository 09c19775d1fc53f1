"""All enum types for the discussion board data model."""

import enum


# --- Accounts & Roles ---

class PrincipalRole(str, enum.Enum):
    MEMBER = "member"
    MODERATOR = "moderator"
    ADMINISTRATOR = "administrator"


class AccountStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"


class MemberStatus(str, enum.Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class ConsentAction(str, enum.Enum):
    GRANTED = "granted"
    REVOKED = "revoked"


# --- Content ---

class PostStatus(str, enum.Enum):
    PUBLIC = "public"
    HIDDEN = "hidden"
    LOCKED = "locked"


class ReactionType(str, enum.Enum):
    LIKE = "like"
    DISLIKE = "dislike"


# --- Moderation ---

class ReportContentType(str, enum.Enum):
    POST = "post"
    COMMENT = "comment"


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class ModerationTarget(str, enum.Enum):
    MEMBER = "member"
    POST = "post"
    COMMENT = "comment"


class ModerationActionType(str, enum.Enum):
    WARN = "warn"
    MUTE = "mute"
    REMOVE = "remove"
    EDIT = "edit"
    RESTRICT = "restrict"
    RESTORE = "restore"
    ESCALATE = "escalate"


class ModerationActionStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    REVOKED = "revoked"


class AppealStatus(str, enum.Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class ModerationLogEvent(str, enum.Enum):
    ACTION_TAKEN = "action_taken"
    STATUS_UPDATE = "status_update"
    ESCALATION = "escalation"
    NOTE = "note"


# --- Notifications ---

class NotificationType(str, enum.Enum):
    MODERATION_ACTION = "moderation_action"
    APPEAL_UPDATE = "appeal_update"
    REPORT_UPDATE = "report_update"
    SYSTEM = "system"


class ChannelType(str, enum.Enum):
    EMAIL = "email"
    APP_PUSH = "app_push"
    SMS = "sms"
    IN_APP = "in_app"


# --- Audit ---

class AuditAction(str, enum.Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    PURGE = "purge"
    LOGIN = "login"
