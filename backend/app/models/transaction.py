"""Transaction model."""
import enum
import uuid

from sqlalchemy import Column, Enum, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from app.database import Base
from app.models.user import utc_now_iso


class TransactionType(str, enum.Enum):
    """Direction of money flow."""

    EXPENSE = "expense"
    INCOME = "income"


class Transaction(Base):
    """Single income or expense entry recorded by a user."""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_user_date", "user_id", "date"),
        Index("ix_transactions_category", "user_id", "category"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    type = Column(
        Enum(TransactionType, values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
    )
    amount = Column(Float, nullable=False)  # Always positive; direction comes from type
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    category = Column(String(100), nullable=False)
    description = Column(Text)

    created_at = Column(String(32), default=utc_now_iso)

    # Relationships
    user = relationship("User", back_populates="transactions")
