"""Add machinery listings, chat access review and user capability flags.

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

CAPABILITIES = ("can_chat", "can_sell", "can_buy", "is_seller_approved")


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def upgrade() -> None:
    with op.batch_alter_table("users") as batch_op:
        batch_op.add_column(sa.Column("role", sa.String(16), nullable=False, server_default="USER"))
        for name in CAPABILITIES:
            batch_op.add_column(sa.Column(name, sa.Boolean(), nullable=False, server_default=sa.false()))

    op.create_table(
        "machinery",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("firebase_uid", sa.String(128), nullable=True),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("category", sa.String(128), nullable=False),
        sa.Column("capacity", sa.String(128), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(32), nullable=False, server_default="piece"),
        sa.Column("image", sa.String(2048), nullable=True),
        sa.Column("location", sa.String(256), nullable=True),
        sa.Column("supplier", sa.String(256), nullable=True),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("in_stock", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("condition", sa.String(64), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("specifications", sa.Text(), nullable=True),
        sa.Column("features", sa.Text(), nullable=True),
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_machinery_firebase_uid", "machinery", ["firebase_uid"])

    op.create_table(
        "machinery_conversations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "machinery_id", sa.Integer(),
            sa.ForeignKey("machinery.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("seller_uid", sa.String(128), nullable=False),
        sa.Column("buyer_uid", sa.String(128), nullable=False),
        sa.Column("permission_granted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("last_message", sa.Text(), nullable=True),
        _timestamp("last_message_time"),
        _timestamp("created_at"),
        sa.UniqueConstraint(
            "machinery_id", "seller_uid", "buyer_uid", name="uq_machinery_conversation_parties"
        ),
    )

    op.create_table(
        "chat_requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_uid", sa.String(128), nullable=False),
        sa.Column("user_name", sa.String(256), nullable=True),
        sa.Column("user_email", sa.String(320), nullable=True),
        sa.Column("job_id", sa.Integer(), sa.ForeignKey("jobs.id", ondelete="CASCADE"), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        _timestamp("requested_at"),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.String(128), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_chat_requests_user_uid", "chat_requests", ["user_uid"])

    op.create_table(
        "chat_permissions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("requester_uid", sa.String(128), nullable=False),
        sa.Column("requester_name", sa.String(256), nullable=True),
        sa.Column("seller_uid", sa.String(128), nullable=False),
        sa.Column("seller_name", sa.String(256), nullable=True),
        sa.Column(
            "machinery_id", sa.Integer(),
            sa.ForeignKey("machinery.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        _timestamp("requested_at"),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by", sa.String(128), nullable=True),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_by", sa.String(128), nullable=True),
        sa.UniqueConstraint(
            "requester_uid", "seller_uid", "machinery_id", name="uq_chat_permission_parties"
        ),
    )


def downgrade() -> None:
    op.drop_table("chat_permissions")
    op.drop_index("ix_chat_requests_user_uid", table_name="chat_requests")
    op.drop_table("chat_requests")
    op.drop_table("machinery_conversations")
    op.drop_index("ix_machinery_firebase_uid", table_name="machinery")
    op.drop_table("machinery")
    with op.batch_alter_table("users") as batch_op:
        for name in reversed(CAPABILITIES):
            batch_op.drop_column(name)
        batch_op.drop_column("role")
