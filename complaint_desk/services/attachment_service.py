"""Attachment service for file validation, storage and removal."""
from typing import Optional
import asyncio
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from complaint_desk.config import settings
from complaint_desk.core.storage import StorageClient
from complaint_desk.db_types import parse_uuid
from complaint_desk.models.complaint import Attachment, Complaint


logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/webp",
    "text/plain",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


class UploadError(Exception):
    """Raised when an uploaded file is rejected."""
    pass


class AttachmentService:
    """Service for attachment operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_attachment_by_id(self, attachment_id) -> Optional[Attachment]:
        """Get attachment with its owning complaint loaded."""
        attachment_uuid = parse_uuid(attachment_id)
        if attachment_uuid is None:
            return None

        result = await self.db.execute(
            select(Attachment)
            .options(joinedload(Attachment.complaint))
            .where(Attachment.id == attachment_uuid)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def validate_file(content: bytes, content_type: Optional[str], filename: Optional[str]) -> None:
        """
        Reject empty, oversized or unsupported files.

        Raises:
            UploadError: describing why the file was rejected
        """
        if not filename:
            raise UploadError("File name is required")
        if not content:
            raise UploadError("File is empty")
        if len(content) > settings.MAX_UPLOAD_SIZE:
            max_mb = settings.MAX_UPLOAD_SIZE / (1024 * 1024)
            actual_mb = len(content) / (1024 * 1024)
            raise UploadError(f"File too large: {actual_mb:.1f}MB. Maximum: {max_mb:.0f}MB")
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise UploadError(f"Unsupported file type: {content_type}")

    async def add_attachment(
        self,
        complaint: Complaint,
        content: bytes,
        filename: str,
        content_type: Optional[str],
        uploaded_by: uuid.UUID,
    ) -> Attachment:
        """Store a file and record it against the complaint."""
        self.validate_file(content, content_type, filename)

        path = StorageClient.generate_unique_filename(
            filename, prefix=f"uploads/{complaint.id.hex}"
        )
        await asyncio.to_thread(StorageClient.upload, content, path)

        attachment = Attachment(
            complaint_id=complaint.id,
            filename=filename,
            path=path,
            content_type=content_type,
            size=len(content),
            uploaded_by_id=uploaded_by,
        )
        self.db.add(attachment)
        try:
            await self.db.commit()
        except Exception:
            # Don't leave an orphaned file behind a failed insert
            await self._remove_file(path)
            raise

        return attachment

    async def delete_attachment(self, attachment: Attachment) -> None:
        """
        Delete the stored file, then the record.

        The file is removed best-effort: a missing or undeletable file is
        logged and the record is deleted regardless.
        """
        await self._remove_file(attachment.path)

        await self.db.delete(attachment)
        await self.db.commit()

    @staticmethod
    async def _remove_file(path: str) -> None:
        try:
            await asyncio.to_thread(StorageClient.delete, path)
        except (OSError, ValueError) as e:
            logger.warning(f"Error deleting attachment file {path}: {e}")
