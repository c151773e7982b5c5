"""Create marketplace schema: users, jobs, chat, bids, content, forum.

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


def _timestamps(*names: str) -> list[sa.Column]:
    return [
        sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
        for name in names
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("firebase_uid", sa.String(128), unique=True, nullable=False),
        sa.Column("email", sa.String(320), unique=True, nullable=False),
        sa.Column("display_name", sa.String(256), nullable=True),
        sa.Column("photo_url", sa.String(2048), nullable=True),
        *_timestamps("created_at", "updated_at", "last_login"),
    )

    op.create_table(
        "jobs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("firebase_uid", sa.String(128), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("category", sa.String(128), nullable=False),
        sa.Column("material", sa.String(128), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("budget", sa.Float(), nullable=False),
        sa.Column("location", sa.String(256), nullable=False),
        sa.Column("client", sa.String(256), nullable=False),
        sa.Column("deadline", sa.Date(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("requirements", sa.Text(), nullable=True),
        sa.Column("specifications", sa.Text(), nullable=True),
        sa.Column("estimated_duration", sa.String(128), nullable=True),
        sa.Column("status", sa.String(32), nullable=False, server_default="active"),
        sa.Column("bids_received", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rating", sa.Float(), nullable=True),
        *_timestamps("posted_date", "updated_at"),
        sa.Column("priority", sa.String(16), nullable=False, server_default="normal"),
        sa.Column("boost_requested", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("boost_approved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("boost_requested_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("boost_approved_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_jobs_firebase_uid", "jobs", ["firebase_uid"])

    op.create_table(
        "conversations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("job_id", sa.Integer(), sa.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("job_owner_uid", sa.String(128), nullable=False),
        sa.Column("participant_uid", sa.String(128), nullable=False),
        sa.Column("job_title", sa.String(256), nullable=False),
        sa.Column("last_message", sa.Text(), nullable=True),
        *_timestamps("last_message_time", "created_at"),
        sa.UniqueConstraint(
            "job_id", "job_owner_uid", "participant_uid",
            name="uq_conversation_job_owner_participant",
        ),
    )
    op.create_index("ix_conversations_job_owner_uid", "conversations", ["job_owner_uid"])
    op.create_index("ix_conversations_participant_uid", "conversations", ["participant_uid"])

    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "conversation_id", sa.Integer(),
            sa.ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("sender_uid", sa.String(128), nullable=False),
        sa.Column("sender_name", sa.String(256), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        *_timestamps("timestamp"),
    )
    op.create_index("ix_messages_conversation_id", "messages", ["conversation_id"])

    op.create_table(
        "bids",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("job_id", sa.Integer(), sa.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("bidder_uid", sa.String(128), nullable=False),
        sa.Column("bidder_name", sa.String(256), nullable=False),
        sa.Column("bid_amount", sa.Float(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("revision", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps("created_at", "updated_at"),
        sa.UniqueConstraint("job_id", "bidder_uid", name="uq_bids_job_bidder"),
    )

    op.create_table(
        "testimonials",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("company", sa.String(256), nullable=False),
        sa.Column("image", sa.String(2048), nullable=False),
        sa.Column("testimonial", sa.Text(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps("created_at", "updated_at"),
    )

    op.create_table(
        "banners",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("image", sa.String(2048), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps("created_at", "updated_at"),
    )

    op.create_table(
        "sponsors",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("logo", sa.String(2048), nullable=False),
        sa.Column("website", sa.String(2048), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps("created_at", "updated_at"),
    )

    op.create_table(
        "forum_posts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps("created_at"),
    )

    op.create_table(
        "forum_comments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "post_id", sa.Integer(),
            sa.ForeignKey("forum_posts.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        *_timestamps("created_at"),
    )
    op.create_index("ix_forum_comments_post_id", "forum_comments", ["post_id"])


def downgrade() -> None:
    op.drop_table("forum_comments")
    op.drop_table("forum_posts")
    op.drop_table("sponsors")
    op.drop_table("banners")
    op.drop_table("testimonials")
    op.drop_table("bids")
    op.drop_table("messages")
    op.drop_table("conversations")
    op.drop_table("jobs")
    op.drop_table("users")
