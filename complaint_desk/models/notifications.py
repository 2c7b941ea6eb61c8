"""Database models for Notifications module."""
from uuid import uuid4

from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship

from complaint_desk.database import Base
from complaint_desk.db_types import UUIDType, utcnow


class Notification(Base):
    """
    Notification model - in-app messages addressed to a single user.
    """
    __tablename__ = "notifications"

    id = Column(UUIDType, primary_key=True, default=uuid4)

    # Recipient
    user_id = Column(UUIDType, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Related complaint, if any
    complaint_id = Column(UUIDType, ForeignKey("complaints.id", ondelete="SET NULL"), nullable=True)

    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)

    # Status
    read = Column(Boolean, default=False, nullable=False, index=True)
    read_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="notifications")
    complaint = relationship("Complaint")

    __table_args__ = (
        Index("ix_notifications_user_read", "user_id", "read"),
    )

    def __repr__(self) -> str:
        return f"<Notification(title='{self.title}', read={self.read})>"
