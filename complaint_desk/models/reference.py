"""Lookup tables referenced by complaints and users."""
import uuid
from datetime import datetime

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from complaint_desk.database import Base
from complaint_desk.db_types import UUIDType, utcnow


class _NamedLookup:
    id: Mapped[uuid.UUID] = mapped_column(UUIDType, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(name='{self.name}')>"


class Branch(_NamedLookup, Base):
    __tablename__ = "branches"


class LineOfBusiness(_NamedLookup, Base):
    __tablename__ = "lines_of_business"


class ComplaintStatus(_NamedLookup, Base):
    __tablename__ = "complaint_statuses"


class ComplaintType(_NamedLookup, Base):
    __tablename__ = "complaint_types"
