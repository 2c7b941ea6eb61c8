"""Pydantic schemas for Notifications module."""
from datetime import datetime
from typing import Optional, List
from uuid import UUID

from complaint_desk.schemas.base import BaseResponseSchema
from complaint_desk.schemas.complaint import ComplaintSummary


class NotificationResponse(BaseResponseSchema):
    id: UUID
    user_id: UUID
    complaint_id: Optional[UUID] = None
    title: str
    message: str
    read: bool
    read_at: Optional[datetime] = None
    created_at: datetime
    complaint: Optional[ComplaintSummary] = None


class NotificationListResponse(BaseResponseSchema):
    items: List[NotificationResponse]
    total: int
    unread_count: int


class MarkAllReadResponse(BaseResponseSchema):
    marked_read: int
