"""User-posted machinery listings and the buyer/seller threads opened on them."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, JSONText


class Machinery(Base):
    """A machine offered for sale. Hidden from the public list until approved."""

    __tablename__ = "machinery"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Listings outlive their poster; admin-created listings have no owner
    user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    firebase_uid: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    category: Mapped[str] = mapped_column(String(128), nullable=False)
    capacity: Mapped[str | None] = mapped_column(String(128), nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[str] = mapped_column(String(32), nullable=False, default="piece")
    image: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    location: Mapped[str | None] = mapped_column(String(256), nullable=True)
    supplier: Mapped[str | None] = mapped_column(String(256), nullable=True)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    in_stock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    condition: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    specifications: Mapped[dict | list | None] = mapped_column(JSONText, nullable=True)
    features: Mapped[dict | list | None] = mapped_column(JSONText, nullable=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )

    owner = relationship("User", lazy="selectin")


class MachineryConversation(Base):
    """Buyer/seller thread about one listing, opened when an admin grants permission."""

    __tablename__ = "machinery_conversations"
    __table_args__ = (
        UniqueConstraint(
            "machinery_id", "seller_uid", "buyer_uid", name="uq_machinery_conversation_parties"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    machinery_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("machinery.id", ondelete="CASCADE"), nullable=False
    )
    seller_uid: Mapped[str] = mapped_column(String(128), nullable=False)
    buyer_uid: Mapped[str] = mapped_column(String(128), nullable=False)
    permission_granted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_message_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
