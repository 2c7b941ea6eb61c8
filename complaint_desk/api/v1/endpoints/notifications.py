"""API endpoints for Notifications module.

Every lookup is filtered by the requester's id, so another user's
notification answers 404 rather than 403.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from complaint_desk.api.deps import DB, CurrentSession
from complaint_desk.schemas.base import MessageResponse
from complaint_desk.schemas.notifications import (
    NotificationResponse, NotificationListResponse, MarkAllReadResponse,
)
from complaint_desk.services.notification_service import NotificationService

router = APIRouter(tags=["Notifications"])


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Notification not found"
    )


@router.get("", response_model=NotificationListResponse)
async def get_my_notifications(
    db: DB,
    claims: CurrentSession,
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=100),
    read: Optional[bool] = None,
):
    """Get current user's notifications."""
    service = NotificationService(db)
    notifications, total, unread_count = await service.list_for_user(
        claims.id,
        read=read,
        skip=(page - 1) * size,
        limit=size,
    )

    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n) for n in notifications],
        total=total,
        unread_count=unread_count,
    )


@router.put("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    db: DB,
    claims: CurrentSession,
):
    """Mark all notifications as read for current user."""
    marked = await NotificationService(db).mark_all_read(claims.id)
    return MarkAllReadResponse(marked_read=marked)


@router.get("/{notification_id}", response_model=NotificationResponse)
async def get_notification(
    notification_id: str,
    db: DB,
    claims: CurrentSession,
):
    """Get a single notification."""
    notification = await NotificationService(db).get_for_user(notification_id, claims.id)

    if not notification:
        raise _not_found()

    return NotificationResponse.model_validate(notification)


@router.put("/{notification_id}", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    db: DB,
    claims: CurrentSession,
):
    """Mark a notification as read."""
    service = NotificationService(db)
    notification = await service.get_for_user(notification_id, claims.id)

    if not notification:
        raise _not_found()

    notification = await service.mark_read(notification)
    return NotificationResponse.model_validate(notification)


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(
    notification_id: str,
    db: DB,
    claims: CurrentSession,
):
    """Delete a notification."""
    service = NotificationService(db)
    notification = await service.get_for_user(notification_id, claims.id)

    if not notification:
        raise _not_found()

    await service.delete(notification)

    return MessageResponse(message="Notification deleted")
