import uuid
from datetime import datetime
from typing import Optional, List

from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from complaint_desk.database import Base
from complaint_desk.db_types import UUIDType, utcnow
from complaint_desk.models.reference import (
    Branch, LineOfBusiness, ComplaintStatus, ComplaintType,
)
from complaint_desk.models.user import User


DEFAULT_POLICY_TYPE = "General"
DEFAULT_CHANNEL = "WEB"


class Complaint(Base):
    """
    Customer complaint.

    created_by_id is fixed at creation; assigned_to_id moves as the
    complaint is handed between users.
    """
    __tablename__ = "complaints"

    id: Mapped[uuid.UUID] = mapped_column(UUIDType, primary_key=True, default=uuid.uuid4)
    complaint_number: Mapped[str] = mapped_column(String(30), unique=True, nullable=False, index=True)

    # Customer / policy
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_id: Mapped[str] = mapped_column(String(100), nullable=False)
    policy_number: Mapped[str] = mapped_column(String(100), nullable=False)
    policy_type: Mapped[str] = mapped_column(String(100), default=DEFAULT_POLICY_TYPE, nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False)
    channel: Mapped[str] = mapped_column(String(50), default=DEFAULT_CHANNEL, nullable=False)

    # References
    status_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType, ForeignKey("complaint_statuses.id"), nullable=False
    )
    type_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType, ForeignKey("complaint_types.id"), nullable=False
    )
    branch_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType, ForeignKey("branches.id"), nullable=False
    )
    line_of_business_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType, ForeignKey("lines_of_business.id"), nullable=False
    )

    # Ownership
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType, ForeignKey("users.id"), nullable=False, index=True
    )
    assigned_to_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUIDType, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    # Relationships
    status: Mapped[ComplaintStatus] = relationship(ComplaintStatus)
    complaint_type: Mapped[ComplaintType] = relationship(ComplaintType)
    branch: Mapped[Branch] = relationship(Branch)
    line_of_business: Mapped[LineOfBusiness] = relationship(LineOfBusiness)
    created_by: Mapped[User] = relationship(User, foreign_keys=[created_by_id])
    assigned_to: Mapped[Optional[User]] = relationship(User, foreign_keys=[assigned_to_id])

    actions: Mapped[List["ComplaintAction"]] = relationship(
        "ComplaintAction",
        back_populates="complaint",
        cascade="all, delete-orphan",
        order_by="ComplaintAction.created_at",
    )
    attachments: Mapped[List["Attachment"]] = relationship(
        "Attachment",
        back_populates="complaint",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Complaint(number='{self.complaint_number}')>"


class ComplaintAction(Base):
    """Append-only audit entry for a change made to a complaint."""
    __tablename__ = "complaint_actions"

    id: Mapped[uuid.UUID] = mapped_column(UUIDType, primary_key=True, default=uuid.uuid4)
    complaint_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType, ForeignKey("complaints.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType, ForeignKey("users.id"), nullable=False
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    complaint: Mapped[Complaint] = relationship(Complaint, back_populates="actions")
    user: Mapped[User] = relationship(User)

    __table_args__ = (
        Index("ix_complaint_actions_complaint_created", "complaint_id", "created_at"),
    )


class Attachment(Base):
    """File uploaded against a complaint. path is relative to the upload root."""
    __tablename__ = "attachments"

    id: Mapped[uuid.UUID] = mapped_column(UUIDType, primary_key=True, default=uuid.uuid4)
    complaint_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType, ForeignKey("complaints.id", ondelete="CASCADE"), nullable=False, index=True
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    path: Mapped[str] = mapped_column(String(500), nullable=False)
    content_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    size: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    uploaded_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUIDType, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    complaint: Mapped[Complaint] = relationship(Complaint, back_populates="attachments")
