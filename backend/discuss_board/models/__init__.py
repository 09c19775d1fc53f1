"""All discussion board database models.

Import all models here so Alembic and SQLAlchemy can discover them.
"""

from discuss_board.models.base import Base, BaseModel, BaseModelNoSoftDelete  # noqa: F401

# Accounts & Auth
from discuss_board.models.account import (  # noqa: F401
    Administrator,
    ConsentRecord,
    JwtSession,
    Member,
    Moderator,
    UserAccount,
)

# Content
from discuss_board.models.content import (  # noqa: F401
    Attachment,
    Comment,
    CommentDeletionLog,
    CommentEditHistory,
    CommentReaction,
    Post,
    PostEditHistory,
    PostReaction,
    PostTag,
    Tag,
)

# Moderation
from discuss_board.models.moderation import (  # noqa: F401
    Appeal,
    ContentReport,
    ForbiddenWord,
    ModerationAction,
    ModerationLog,
)

# Notifications
from discuss_board.models.notification import Notification, NotificationChannel  # noqa: F401

# Audit
from discuss_board.models.audit import AuditLog  # noqa: F401
