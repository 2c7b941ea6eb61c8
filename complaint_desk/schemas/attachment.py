from datetime import datetime
from typing import Optional
from uuid import UUID

from complaint_desk.schemas.base import BaseResponseSchema


class AttachmentResponse(BaseResponseSchema):
    id: UUID
    complaint_id: UUID
    filename: str
    path: str
    content_type: Optional[str] = None
    size: int
    uploaded_by_id: Optional[UUID] = None
    created_at: datetime
