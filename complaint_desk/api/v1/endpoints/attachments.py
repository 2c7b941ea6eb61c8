from fastapi import APIRouter, HTTPException, status

from complaint_desk.api.deps import DB, CurrentSession
from complaint_desk.core.permissions import can_access_attachment
from complaint_desk.schemas.base import MessageResponse
from complaint_desk.services.attachment_service import AttachmentService

router = APIRouter(tags=["Attachments"])


@router.delete("/{attachment_id}", response_model=MessageResponse)
async def delete_attachment(
    attachment_id: str,
    db: DB,
    claims: CurrentSession,
):
    """
    Delete an attachment.

    The stored file is removed first on a best-effort basis; the record is
    deleted even when the file is already gone.
    """
    service = AttachmentService(db)
    attachment = await service.get_attachment_by_id(attachment_id)

    if not attachment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Attachment not found"
        )

    if not can_access_attachment(claims, attachment):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden"
        )

    await service.delete_attachment(attachment)

    return MessageResponse(message="Attachment deleted successfully")
