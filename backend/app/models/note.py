"""Note model."""
import uuid

from sqlalchemy import Boolean, Column, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from app.database import Base
from app.models.user import utc_now_iso

DEFAULT_NOTE_COLOR = "#1e293b"


class Note(Base):
    """Free-form note pinned to a user's dashboard."""

    __tablename__ = "notes"
    __table_args__ = (
        Index("ix_notes_user_pinned", "user_id", "is_pinned"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False, default="")
    tags = Column(Text, default="[]")  # JSON list of strings
    is_pinned = Column(Boolean, nullable=False, default=False)
    color = Column(String(20), nullable=False, default=DEFAULT_NOTE_COLOR)

    created_at = Column(String(32), default=utc_now_iso)
    updated_at = Column(String(32), default=utc_now_iso, onupdate=utc_now_iso)

    user = relationship("User", back_populates="notes")
