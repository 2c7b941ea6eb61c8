from fastapi import APIRouter

from complaint_desk.api.v1.endpoints import (
    auth,
    complaints,
    attachments,
    notifications,
)

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(auth.router, prefix="/auth")
api_router.include_router(complaints.router, prefix="/complaints")
api_router.include_router(attachments.router, prefix="/attachments")
api_router.include_router(notifications.router, prefix="/notifications")
