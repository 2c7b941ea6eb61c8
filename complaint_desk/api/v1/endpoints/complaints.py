"""Complaint API endpoints."""
from typing import Optional, List
from math import ceil
import logging
import uuid

from fastapi import APIRouter, HTTPException, status, Query, UploadFile, File
from sqlalchemy.exc import IntegrityError, NoResultFound
from sqlalchemy.orm.exc import StaleDataError

from complaint_desk.api.deps import DB, CurrentSession
from complaint_desk.core.permissions import can_access_complaint
from complaint_desk.models.complaint import Complaint
from complaint_desk.schemas.attachment import AttachmentResponse
from complaint_desk.schemas.base import NamedRef, UserBrief
from complaint_desk.schemas.complaint import (
    ComplaintWrite,
    ComplaintCreate,
    ComplaintUpdate,
    ComplaintResponse,
    ComplaintListResponse,
    ComplaintActionResponse,
)
from complaint_desk.services.attachment_service import AttachmentService, UploadError
from complaint_desk.services.complaint_service import ComplaintService, ComplaintNumberUnavailable


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Complaints"])

MISSING_FIELDS = "Missing required fields"
INVALID_REFERENCE = "Invalid reference"


def _validate_write(data: ComplaintWrite) -> None:
    """Reject bodies with blank required fields or ids that are not UUIDs."""
    if data.missing_fields():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=MISSING_FIELDS)
    if data.invalid_references():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_REFERENCE)


def _build_complaint_response(complaint: Complaint) -> ComplaintResponse:
    """Build complaint response with denormalized references."""
    return ComplaintResponse(
        id=complaint.id,
        complaint_number=complaint.complaint_number,
        customer_name=complaint.customer_name,
        customer_id=complaint.customer_id,
        policy_number=complaint.policy_number,
        policy_type=complaint.policy_type,
        description=complaint.description,
        channel=complaint.channel,
        status_id=complaint.status_id,
        type_id=complaint.type_id,
        branch_id=complaint.branch_id,
        line_of_business_id=complaint.line_of_business_id,
        created_by_id=complaint.created_by_id,
        assigned_to_id=complaint.assigned_to_id,
        status=NamedRef.model_validate(complaint.status),
        type=NamedRef.model_validate(complaint.complaint_type),
        branch=NamedRef.model_validate(complaint.branch),
        line_of_business=NamedRef.model_validate(complaint.line_of_business),
        created_by=UserBrief.model_validate(complaint.created_by),
        assigned_to=UserBrief.model_validate(complaint.assigned_to) if complaint.assigned_to else None,
        created_at=complaint.created_at,
        updated_at=complaint.updated_at,
    )


async def _get_accessible_complaint(
    service: ComplaintService,
    complaint_id: str,
    claims,
) -> Complaint:
    """Fetch a complaint, 404 if absent, 403 if the requester may not act on it."""
    complaint = await service.get_complaint_by_id(complaint_id)

    if not complaint:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Complaint not found"
        )

    if not can_access_complaint(claims, complaint):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden"
        )

    return complaint


@router.get("", response_model=ComplaintListResponse)
async def list_complaints(
    db: DB,
    claims: CurrentSession,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    status_id: Optional[uuid.UUID] = Query(None, alias="statusId"),
):
    """
    Get paginated list of complaints.

    ADMIN sees all complaints, USER only the ones assigned to them.
    """
    service = ComplaintService(db)
    skip = (page - 1) * size

    complaints, total = await service.get_complaints(
        claims,
        status_id=status_id,
        skip=skip,
        limit=size,
    )

    return ComplaintListResponse(
        items=[_build_complaint_response(c) for c in complaints],
        total=total,
        page=page,
        size=size,
        pages=ceil(total / size) if total > 0 else 1,
    )


@router.post("", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
async def create_complaint(
    data: ComplaintCreate,
    db: DB,
    claims: CurrentSession,
):
    """Create a complaint owned by the requester."""
    _validate_write(data)

    service = ComplaintService(db)
    try:
        complaint = await service.create_complaint(data, created_by=claims.id)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_REFERENCE)
    except ComplaintNumberUnavailable:
        logger.exception("Complaint number allocation failed")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Complaint number conflict, please retry",
        )

    return _build_complaint_response(complaint)


@router.get("/{complaint_id}", response_model=ComplaintResponse)
async def get_complaint(
    complaint_id: str,
    db: DB,
    claims: CurrentSession,
):
    """Get complaint by ID."""
    service = ComplaintService(db)
    complaint = await _get_accessible_complaint(service, complaint_id, claims)
    return _build_complaint_response(complaint)


@router.put("/{complaint_id}", response_model=ComplaintResponse)
async def update_complaint(
    complaint_id: str,
    data: ComplaintUpdate,
    db: DB,
    claims: CurrentSession,
):
    """
    Update a complaint.

    Every successful update appends one entry to the complaint's action log.
    """
    service = ComplaintService(db)
    complaint = await _get_accessible_complaint(service, complaint_id, claims)

    _validate_write(data)

    try:
        updated = await service.update_complaint(complaint, data, updated_by=claims.id)
    except (StaleDataError, NoResultFound):
        # Row vanished between the lookup and the write
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Complaint not found")
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_REFERENCE)

    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Complaint not found")

    return _build_complaint_response(updated)


@router.get("/{complaint_id}/actions", response_model=List[ComplaintActionResponse])
async def list_complaint_actions(
    complaint_id: str,
    db: DB,
    claims: CurrentSession,
):
    """Get the audit trail of a complaint."""
    service = ComplaintService(db)
    complaint = await _get_accessible_complaint(service, complaint_id, claims)
    actions = await service.get_actions(complaint.id)
    return [ComplaintActionResponse.model_validate(a) for a in actions]


@router.post(
    "/{complaint_id}/attachments",
    response_model=AttachmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_attachment(
    complaint_id: str,
    db: DB,
    claims: CurrentSession,
    file: UploadFile = File(...),
):
    """Attach a file to a complaint."""
    service = ComplaintService(db)
    complaint = await _get_accessible_complaint(service, complaint_id, claims)

    content = await file.read()
    try:
        attachment = await AttachmentService(db).add_attachment(
            complaint,
            content=content,
            filename=file.filename,
            content_type=file.content_type,
            uploaded_by=claims.id,
        )
    except UploadError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return AttachmentResponse.model_validate(attachment)
