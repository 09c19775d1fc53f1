"""Post reactions, edit histories, moderation logs, forbidden words.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE = sa.text("deleted_at IS NULL")


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True)


def _fk(name: str, target: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.Uuid(), sa.ForeignKey(f"{target}.id"), nullable=nullable)


def _timestamps(soft_delete: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]
    if soft_delete:
        columns.append(sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True))
    return columns


def upgrade() -> None:
    op.create_table(
        "post_reaction",
        _id(),
        _fk("member_id", "member"),
        _fk("post_id", "post"),
        sa.Column("reaction_type", sa.String(32), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("member_id", "post_id", name="uq_post_reaction_member_post"),
    )
    op.create_index("ix_post_reaction_post", "post_reaction", ["post_id"])

    op.create_table(
        "post_edit_history",
        _id(),
        _fk("post_id", "post"),
        _fk("editor_account_id", "user_account"),
        sa.Column("editor_role", sa.String(32), nullable=False),
        sa.Column("previous_title", sa.String(300), nullable=False),
        sa.Column("previous_body", sa.Text, nullable=False),
        sa.Column("edited_title", sa.String(300), nullable=False),
        sa.Column("edited_body", sa.Text, nullable=False),
        *_timestamps(soft_delete=False),
    )
    op.create_index("ix_post_edit_history_post", "post_edit_history", ["post_id", "created_at"])

    op.create_table(
        "comment_edit_history",
        _id(),
        _fk("comment_id", "comment"),
        _fk("post_id", "post"),
        _fk("editor_account_id", "user_account"),
        sa.Column("editor_role", sa.String(32), nullable=False),
        sa.Column("previous_content", sa.Text, nullable=False),
        sa.Column("edited_content", sa.Text, nullable=False),
        *_timestamps(soft_delete=False),
    )
    op.create_index(
        "ix_comment_edit_history_comment", "comment_edit_history", ["comment_id", "created_at"]
    )

    op.create_table(
        "moderation_log",
        _id(),
        _fk("moderation_action_id", "moderation_action"),
        _fk("actor_account_id", "user_account"),
        sa.Column("event_type", sa.String(32), nullable=False),
        sa.Column("event_details", sa.Text, nullable=True),
        *_timestamps(soft_delete=False),
    )
    op.create_index(
        "ix_moderation_log_action", "moderation_log", ["moderation_action_id", "created_at"]
    )

    op.create_table(
        "forbidden_word",
        _id(),
        sa.Column("expression", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "uq_forbidden_word_expression_active",
        "forbidden_word",
        ["expression"],
        unique=True,
        postgresql_where=ACTIVE,
    )


def downgrade() -> None:
    op.drop_table("forbidden_word")
    op.drop_table("moderation_log")
    op.drop_table("comment_edit_history")
    op.drop_table("post_edit_history")
    op.drop_table("post_reaction")
