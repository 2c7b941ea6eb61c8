from complaint_desk.models.reference import Branch, LineOfBusiness, ComplaintStatus, ComplaintType
from complaint_desk.models.user import User, Role
from complaint_desk.models.complaint import Complaint, ComplaintAction, Attachment
from complaint_desk.models.notifications import Notification

__all__ = [
    "Branch",
    "LineOfBusiness",
    "ComplaintStatus",
    "ComplaintType",
    "User",
    "Role",
    "Complaint",
    "ComplaintAction",
    "Attachment",
    "Notification",
]
