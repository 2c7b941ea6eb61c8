"""Notification lookups and writes, always scoped to the recipient."""
from datetime import datetime, timezone
from typing import Optional, List, Tuple
import uuid

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from complaint_desk.db_types import parse_uuid
from complaint_desk.models.notifications import Notification


class NotificationService:
    """Service for notification operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_for_user(
        self,
        notification_id,
        user_id: uuid.UUID,
    ) -> Optional[Notification]:
        """
        Get a notification owned by user_id.

        A notification that exists but belongs to someone else is reported
        the same way as one that does not exist.
        """
        notification_uuid = parse_uuid(notification_id)
        if notification_uuid is None:
            return None

        result = await self.db.execute(
            select(Notification)
            .options(joinedload(Notification.complaint))
            .where(Notification.id == notification_uuid)
            .where(Notification.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_for_user(
        self,
        user_id: uuid.UUID,
        read: Optional[bool] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[Notification], int, int]:
        """Get a user's notifications, newest first, with total and unread counts."""
        query = (
            select(Notification)
            .options(joinedload(Notification.complaint))
            .where(Notification.user_id == user_id)
        )
        if read is not None:
            query = query.where(Notification.read == read)

        total = await self.db.scalar(
            select(func.count()).select_from(query.subquery())
        )
        unread_count = await self.db.scalar(
            select(func.count(Notification.id))
            .where(Notification.user_id == user_id)
            .where(Notification.read == False)  # noqa: E712
        )

        query = query.order_by(Notification.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total or 0, unread_count or 0

    async def mark_read(self, notification: Notification) -> Notification:
        if not notification.read:
            notification.read = True
            notification.read_at = datetime.now(timezone.utc)
        await self.db.commit()
        return notification

    async def mark_all_read(self, user_id: uuid.UUID) -> int:
        """Mark every unread notification of a user as read."""
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id)
            .where(Notification.read == False)  # noqa: E712
            .values(read=True, read_at=datetime.now(timezone.utc))
        )
        await self.db.commit()
        return result.rowcount or 0

    async def delete(self, notification: Notification) -> None:
        await self.db.delete(notification)
        await self.db.commit()

    def notify(
        self,
        user_id: uuid.UUID,
        title: str,
        message: str,
        complaint_id: Optional[uuid.UUID] = None,
    ) -> Notification:
        """Queue a notification on the current transaction. The caller commits."""
        notification = Notification(
            user_id=user_id,
            complaint_id=complaint_id,
            title=title,
            message=message,
        )
        self.db.add(notification)
        return notification
