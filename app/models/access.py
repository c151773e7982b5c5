"""Admin-reviewed requests for chat access."""

import enum
from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class AccessStatus(enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REVOKED = "revoked"


class ChatRequest(Base):
    """A user asking to be allowed to chat, optionally about a specific job."""

    __tablename__ = "chat_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_uid: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    user_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    user_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    job_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=True
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=AccessStatus.PENDING.value)
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class ChatPermission(Base):
    """A buyer asking to chat with the seller of one machinery listing."""

    __tablename__ = "chat_permissions"
    __table_args__ = (
        UniqueConstraint(
            "requester_uid", "seller_uid", "machinery_id", name="uq_chat_permission_parties"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    requester_uid: Mapped[str] = mapped_column(String(128), nullable=False)
    requester_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    seller_uid: Mapped[str] = mapped_column(String(128), nullable=False)
    seller_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    machinery_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("machinery.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=AccessStatus.PENDING.value)
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    revoked_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
