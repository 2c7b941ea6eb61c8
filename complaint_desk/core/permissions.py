"""Ownership rules for complaints, attachments and notifications.

These are plain predicates over the session claims and the already-loaded
record, so they can be checked without a database.
"""
from typing import Optional, Protocol
import uuid

from sqlalchemy import ColumnElement

from complaint_desk.models.complaint import Complaint
from complaint_desk.schemas.auth import SessionClaims


class OwnedComplaint(Protocol):
    created_by_id: uuid.UUID
    assigned_to_id: Optional[uuid.UUID]


class OwnedAttachment(Protocol):
    complaint: OwnedComplaint


class OwnedNotification(Protocol):
    user_id: uuid.UUID


def can_access_complaint(claims: SessionClaims, complaint: OwnedComplaint) -> bool:
    """ADMIN, the creator and the current assignee may read and update a complaint."""
    if claims.is_admin:
        return True
    return claims.id in (complaint.created_by_id, complaint.assigned_to_id)


def can_access_attachment(claims: SessionClaims, attachment: OwnedAttachment) -> bool:
    """Attachments follow the rule of their complaint."""
    return can_access_complaint(claims, attachment.complaint)


def owns_notification(claims: SessionClaims, notification: OwnedNotification) -> bool:
    """Only the recipient may see a notification. ADMIN gets no override."""
    return notification.user_id == claims.id


def complaint_scope(claims: SessionClaims) -> Optional[ColumnElement[bool]]:
    """
    Filter applied when listing complaints.

    ADMIN sees everything. USER only sees complaints assigned to them;
    complaints they created but handed off are not listed.
    """
    if claims.is_admin:
        return None
    return Complaint.assigned_to_id == claims.id
