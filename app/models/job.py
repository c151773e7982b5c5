"""Job SQLAlchemy model: a work listing owned by one user."""

import enum
from datetime import UTC, date, datetime

from sqlalchemy import Boolean, Date, DateTime, Float, ForeignKey, Integer, String, Text, case
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, JSONText


class JobPriority(enum.Enum):
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


# Conventional status values. Stored status is free-form and case-insensitive.
JOB_STATUSES = ("open", "active", "in-progress", "completed", "cancelled")


class Job(Base):
    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    firebase_uid: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    category: Mapped[str] = mapped_column(String(128), nullable=False)
    material: Mapped[str] = mapped_column(String(128), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    budget: Mapped[float] = mapped_column(Float, nullable=False)
    location: Mapped[str] = mapped_column(String(256), nullable=False)
    client: Mapped[str] = mapped_column(String(256), nullable=False)
    deadline: Mapped[date | None] = mapped_column(Date, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    requirements: Mapped[dict | list | None] = mapped_column(JSONText, nullable=True, default=dict)
    specifications: Mapped[dict | list | None] = mapped_column(JSONText, nullable=True, default=list)
    estimated_duration: Mapped[str | None] = mapped_column(String(128), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="active")
    bids_received: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    posted_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default=JobPriority.NORMAL.value
    )
    boost_requested: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    boost_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    boost_requested_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    boost_approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    owner = relationship("User", lazy="selectin")


# high first, then normal, then low, then anything unexpected
PRIORITY_ORDER = case(
    (Job.priority == JobPriority.HIGH.value, 1),
    (Job.priority == JobPriority.NORMAL.value, 2),
    (Job.priority == JobPriority.LOW.value, 3),
    else_=4,
)
