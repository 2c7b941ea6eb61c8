"""Database-agnostic type definitions for SQLAlchemy models.

This module provides type definitions that work with both SQLite and PostgreSQL.
"""
from datetime import datetime, timezone
from typing import Optional
import uuid

from sqlalchemy import Uuid

# Native UUID on PostgreSQL, CHAR(32) on SQLite
UUIDType = Uuid


def utcnow() -> datetime:
    """Timezone-aware current time used for column defaults."""
    return datetime.now(timezone.utc)


def parse_uuid(value) -> Optional[uuid.UUID]:
    """Parse an id taken from a URL. Anything that is not a UUID can't exist in the store."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None
