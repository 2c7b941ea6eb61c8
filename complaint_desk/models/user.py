import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional, List

from sqlalchemy import String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from complaint_desk.database import Base
from complaint_desk.db_types import UUIDType, utcnow

if TYPE_CHECKING:
    from complaint_desk.models.reference import Branch, LineOfBusiness
    from complaint_desk.models.notifications import Notification


class Role(str, Enum):
    """Coarse access level of a user."""
    ADMIN = "ADMIN"
    USER = "USER"


class User(Base):
    """
    User model for authentication and authorization.
    A user has a single role and may belong to a branch and line of business.
    """
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20),
        default=Role.USER.value,
        nullable=False,
        comment="ADMIN, USER"
    )

    branch_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUIDType,
        ForeignKey("branches.id", ondelete="SET NULL"),
        nullable=True
    )
    line_of_business_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUIDType,
        ForeignKey("lines_of_business.id", ondelete="SET NULL"),
        nullable=True
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )

    # Relationships
    branch: Mapped[Optional["Branch"]] = relationship("Branch")
    line_of_business: Mapped[Optional["LineOfBusiness"]] = relationship("LineOfBusiness")
    notifications: Mapped[List["Notification"]] = relationship(
        "Notification",
        back_populates="user",
        cascade="all, delete-orphan"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    def __repr__(self) -> str:
        return f"<User(email='{self.email}', role='{self.role}')>"
