# Services module
from complaint_desk.services.auth_service import AuthService
from complaint_desk.services.complaint_service import ComplaintService
from complaint_desk.services.attachment_service import AttachmentService
from complaint_desk.services.notification_service import NotificationService

__all__ = [
    "AuthService",
    "ComplaintService",
    "AttachmentService",
    "NotificationService",
]
