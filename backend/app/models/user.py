"""User model."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship

from app.database import Base


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class User(Base):
    """User account."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)  # Always stored lowercase
    password_hash = Column(String(255), nullable=False)
    is_verified = Column(Boolean, nullable=False, default=False)

    # Pending password reset; both set or both null
    reset_token_hash = Column(String(64))
    reset_token_expires_at = Column(String(32))

    google_id = Column(String(255), unique=True, index=True)

    # Embedded in session tokens; bumping it revokes every earlier session
    token_version = Column(Integer, nullable=False, default=0)

    created_at = Column(String(32), default=utc_now_iso)
    updated_at = Column(String(32), default=utc_now_iso, onupdate=utc_now_iso)

    # Relationships
    budgets = relationship(
        "Budget",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Budget.category",
    )
    transactions = relationship("Transaction", back_populates="user", cascade="all, delete-orphan")
    notes = relationship("Note", back_populates="user", cascade="all, delete-orphan")

    def clear_reset_token(self) -> None:
        self.reset_token_hash = None
        self.reset_token_expires_at = None
