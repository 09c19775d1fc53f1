"""Initial schema - all discussion board tables.

Revision ID: 001
Revises: None
Create Date: 2026-10-19

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE = sa.text("deleted_at IS NULL")


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True)


def _fk(name: str, target: str, nullable: bool = False, **kwargs) -> sa.Column:
    return sa.Column(name, sa.Uuid(), sa.ForeignKey(f"{target}.id"), nullable=nullable, **kwargs)


def _timestamps(soft_delete: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]
    if soft_delete:
        columns.append(sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True))
    return columns


def _enum(length: int = 32) -> sa.String:
    return sa.String(length)


def upgrade() -> None:
    # --- Accounts & Auth ---

    op.create_table(
        "user_account",
        _id(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("email_verified", sa.Boolean, server_default="false"),
        sa.Column("status", _enum(), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "uq_user_account_email_active", "user_account", ["email"],
        unique=True, postgresql_where=ACTIVE,
    )

    op.create_table(
        "member",
        _id(),
        _fk("user_account_id", "user_account", unique=True),
        sa.Column("display_name", sa.String(50), nullable=False),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("status", _enum(), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "uq_member_display_name_active", "member", ["display_name"],
        unique=True, postgresql_where=ACTIVE,
    )

    op.create_table(
        "moderator",
        _id(),
        _fk("user_account_id", "user_account", unique=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean, server_default="true"),
        _fk("assigned_by_account_id", "user_account", nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "administrator",
        _id(),
        _fk("user_account_id", "user_account", unique=True),
        sa.Column("granted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_active", sa.Boolean, server_default="true"),
        *_timestamps(),
    )

    op.create_table(
        "jwt_session",
        _id(),
        _fk("user_account_id", "user_account"),
        sa.Column("jwt_id", sa.String(64), unique=True, nullable=False),
        sa.Column("role", _enum(), nullable=False),
        sa.Column("refresh_token_hash", sa.String(255), nullable=False),
        sa.Column("user_agent", sa.Text, nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(soft_delete=False),
    )
    op.create_index("ix_jwt_session_account", "jwt_session", ["user_account_id"])

    op.create_table(
        "consent_record",
        _id(),
        _fk("user_account_id", "user_account"),
        sa.Column("policy_type", sa.String(64), nullable=False),
        sa.Column("policy_version", sa.String(32), nullable=False),
        sa.Column("consent_action", _enum(), nullable=False),
        *_timestamps(soft_delete=False),
    )
    op.create_index("ix_consent_record_account", "consent_record", ["user_account_id"])

    op.create_table(
        "audit_log",
        _id(),
        _fk("actor_account_id", "user_account", nullable=True),
        sa.Column("action", _enum(), nullable=False),
        sa.Column("entity_type", sa.String(100), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=True),
        sa.Column("old_values", sa.JSON, nullable=True),
        sa.Column("new_values", sa.JSON, nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_log_entity", "audit_log", ["entity_type", "entity_id"])
    op.create_index("ix_audit_log_actor", "audit_log", ["actor_account_id"])
    op.create_index("ix_audit_log_created", "audit_log", ["created_at"])
    op.create_index("ix_audit_log_action", "audit_log", ["action"])

    # --- Content ---

    op.create_table(
        "post",
        _id(),
        _fk("author_member_id", "member"),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("body", sa.Text, nullable=False),
        sa.Column("status", _enum(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_post_author", "post", ["author_member_id"])
    op.create_index("ix_post_created", "post", ["created_at"])

    op.create_table(
        "tag",
        _id(),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("uq_tag_name_active", "tag", ["name"], unique=True, postgresql_where=ACTIVE)

    op.create_table(
        "post_tag",
        _id(),
        _fk("post_id", "post"),
        _fk("tag_id", "tag"),
        *_timestamps(soft_delete=False),
        sa.UniqueConstraint("post_id", "tag_id", name="uq_post_tag"),
    )
    op.create_index("ix_post_tag_tag", "post_tag", ["tag_id"])

    op.create_table(
        "comment",
        _id(),
        _fk("post_id", "post"),
        _fk("author_member_id", "member"),
        _fk("parent_id", "comment", nullable=True),
        sa.Column("body", sa.Text, nullable=False),
        sa.Column("is_locked", sa.Boolean, server_default="false"),
        *_timestamps(),
    )
    op.create_index("ix_comment_post", "comment", ["post_id"])
    op.create_index("ix_comment_author", "comment", ["author_member_id"])

    op.create_table(
        "comment_deletion_log",
        _id(),
        _fk("comment_id", "comment"),
        _fk("post_id", "post"),
        _fk("deleted_by_account_id", "user_account"),
        sa.Column("actor_role", _enum(), nullable=False),
        sa.Column("reason", sa.Text, nullable=True),
        *_timestamps(soft_delete=False),
    )
    op.create_index("ix_comment_deletion_log_comment", "comment_deletion_log", ["comment_id"])

    op.create_table(
        "comment_reaction",
        _id(),
        _fk("member_id", "member"),
        _fk("comment_id", "comment"),
        sa.Column("reaction_type", _enum(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("member_id", "comment_id", name="uq_comment_reaction_member_comment"),
    )

    op.create_table(
        "attachment",
        _id(),
        _fk("post_id", "post", nullable=True),
        _fk("comment_id", "comment", nullable=True),
        _fk("uploaded_by_member_id", "member"),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_url", sa.String(1024), nullable=False),
        sa.Column("content_type", sa.String(100), nullable=False),
        sa.Column("size_bytes", sa.BigInteger, nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "(post_id IS NULL) <> (comment_id IS NULL)", name="ck_attachment_single_parent"
        ),
    )
    op.create_index("ix_attachment_post", "attachment", ["post_id"])
    op.create_index("ix_attachment_comment", "attachment", ["comment_id"])

    # --- Moderation ---

    op.create_table(
        "moderation_action",
        _id(),
        _fk("moderator_account_id", "user_account"),
        sa.Column("content_type", _enum(), nullable=False),
        _fk("target_member_id", "member", nullable=True),
        _fk("target_post_id", "post", nullable=True),
        _fk("target_comment_id", "comment", nullable=True),
        sa.Column("action_type", _enum(), nullable=False),
        sa.Column("action_reason", sa.Text, nullable=False),
        sa.Column("details", sa.Text, nullable=True),
        sa.Column("status", _enum(), nullable=False),
        sa.Column("effective_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("effective_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_moderation_action_moderator", "moderation_action", ["moderator_account_id"])
    op.create_index("ix_moderation_action_member", "moderation_action", ["target_member_id"])
    op.create_index("ix_moderation_action_created", "moderation_action", ["created_at"])

    op.create_table(
        "content_report",
        _id(),
        _fk("reporter_member_id", "member"),
        sa.Column("content_type", _enum(), nullable=False),
        _fk("content_post_id", "post", nullable=True),
        _fk("content_comment_id", "comment", nullable=True),
        sa.Column("reason", sa.Text, nullable=False),
        sa.Column("status", _enum(), nullable=False),
        _fk("moderation_action_id", "moderation_action", nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "(content_post_id IS NULL) <> (content_comment_id IS NULL)",
            name="ck_content_report_single_target",
        ),
    )
    op.create_index(
        "uq_content_report_reporter_post", "content_report",
        ["reporter_member_id", "content_post_id"], unique=True,
        postgresql_where=sa.text("deleted_at IS NULL AND content_post_id IS NOT NULL"),
    )
    op.create_index(
        "uq_content_report_reporter_comment", "content_report",
        ["reporter_member_id", "content_comment_id"], unique=True,
        postgresql_where=sa.text("deleted_at IS NULL AND content_comment_id IS NOT NULL"),
    )
    op.create_index("ix_content_report_status", "content_report", ["status"])

    op.create_table(
        "appeal",
        _id(),
        _fk("moderation_action_id", "moderation_action"),
        _fk("appellant_member_id", "member"),
        sa.Column("appeal_rationale", sa.Text, nullable=False),
        sa.Column("status", _enum(), nullable=False),
        sa.Column("resolution_notes", sa.Text, nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        _fk("resolved_by_account_id", "user_account", nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "uq_appeal_action_appellant_active", "appeal",
        ["moderation_action_id", "appellant_member_id"], unique=True, postgresql_where=ACTIVE,
    )

    # --- Notifications ---

    op.create_table(
        "notification",
        _id(),
        _fk("recipient_account_id", "user_account"),
        sa.Column("notification_type", _enum(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("body", sa.Text, nullable=False),
        sa.Column("entity_type", sa.String(100), nullable=True),
        sa.Column("entity_id", sa.Uuid(), nullable=True),
        sa.Column("is_read", sa.Boolean, server_default="false"),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_notification_recipient", "notification", ["recipient_account_id"])
    op.create_index("ix_notification_read", "notification", ["is_read"])
    op.create_index("ix_notification_created", "notification", ["created_at"])

    op.create_table(
        "notification_channel",
        _id(),
        _fk("member_id", "member"),
        _fk("subscriber_member_id", "member"),
        sa.Column("channel_type", _enum(), nullable=False),
        sa.Column("is_enabled", sa.Boolean, server_default="true"),
        *_timestamps(),
    )
    op.create_index(
        "uq_notification_channel_active", "notification_channel",
        ["member_id", "subscriber_member_id", "channel_type"], unique=True, postgresql_where=ACTIVE,
    )


def downgrade() -> None:
    op.drop_table("notification_channel")
    op.drop_table("notification")
    op.drop_table("appeal")
    op.drop_table("content_report")
    op.drop_table("moderation_action")
    op.drop_table("attachment")
    op.drop_table("comment_reaction")
    op.drop_table("comment_deletion_log")
    op.drop_table("comment")
    op.drop_table("post_tag")
    op.drop_table("tag")
    op.drop_table("post")
    op.drop_table("audit_log")
    op.drop_table("consent_record")
    op.drop_table("jwt_session")
    op.drop_table("administrator")
    op.drop_table("moderator")
    op.drop_table("member")
    op.drop_table("user_account")
