"""Complaint Service for complaint reads, writes and the audit trail."""
from datetime import datetime, timezone
from typing import Optional, List, Tuple
import logging
import uuid

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from complaint_desk.core.permissions import complaint_scope
from complaint_desk.db_types import parse_uuid
from complaint_desk.models.complaint import (
    Complaint, ComplaintAction, DEFAULT_POLICY_TYPE, DEFAULT_CHANNEL,
)
from complaint_desk.schemas.auth import SessionClaims
from complaint_desk.schemas.complaint import ComplaintWrite
from complaint_desk.services.notification_service import NotificationService


logger = logging.getLogger(__name__)

ACTION_CREATED = "Complaint created"
ACTION_UPDATED = "Complaint details updated"

NUMBER_ATTEMPTS = 3


class ComplaintNumberUnavailable(Exception):
    """Raised when concurrent creates keep claiming the generated number."""
    pass


def _with_references(query):
    """Eager-load every relation the complaint response denormalizes."""
    return query.options(
        joinedload(Complaint.status),
        joinedload(Complaint.complaint_type),
        joinedload(Complaint.branch),
        joinedload(Complaint.line_of_business),
        joinedload(Complaint.assigned_to),
        joinedload(Complaint.created_by),
    )


class ComplaintService:
    """Service for complaint operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationService(db)

    async def get_complaint_by_id(self, complaint_id) -> Optional[Complaint]:
        """Get complaint by ID with its references loaded."""
        complaint_uuid = parse_uuid(complaint_id)
        if complaint_uuid is None:
            return None

        query = _with_references(select(Complaint)).where(Complaint.id == complaint_uuid)
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def get_complaints(
        self,
        claims: SessionClaims,
        status_id: Optional[uuid.UUID] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Complaint], int]:
        """Get paginated list of complaints visible to the requester."""
        query = _with_references(select(Complaint))

        conditions = []
        scope = complaint_scope(claims)
        if scope is not None:
            conditions.append(scope)
        if status_id:
            conditions.append(Complaint.status_id == status_id)

        if conditions:
            query = query.where(*conditions)

        count_query = select(func.count()).select_from(query.subquery())
        total = await self.db.scalar(count_query)

        query = query.order_by(Complaint.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query)

        return list(result.scalars().all()), total or 0

    async def get_actions(self, complaint_id: uuid.UUID) -> List[ComplaintAction]:
        """Audit trail of a complaint, oldest first."""
        result = await self.db.execute(
            select(ComplaintAction)
            .options(joinedload(ComplaintAction.user))
            .where(ComplaintAction.complaint_id == complaint_id)
            .order_by(ComplaintAction.created_at)
        )
        return list(result.scalars().all())

    async def create_complaint(
        self,
        data: ComplaintWrite,
        created_by: uuid.UUID,
    ) -> Complaint:
        """
        Create a complaint owned by created_by and record the creation.

        A concurrent create can claim the same complaint number first; the
        number is then regenerated and the insert retried.

        Raises:
            ComplaintNumberUnavailable: if every attempt collided
            IntegrityError: for any other constraint failure
        """
        for attempt in range(1, NUMBER_ATTEMPTS + 1):
            complaint_number = await self._generate_complaint_number()
            complaint = Complaint(
                id=uuid.uuid4(),
                complaint_number=complaint_number,
                created_by_id=created_by,
                **self._writable_values(data),
            )
            self.db.add(complaint)

            self.db.add(ComplaintAction(
                complaint_id=complaint.id,
                user_id=created_by,
                description=ACTION_CREATED,
            ))
            self._notify_assignee(complaint, previous_assignee=None, actor_id=created_by)

            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                if not await self._number_taken(complaint_number):
                    raise
                logger.warning(
                    f"Complaint number {complaint_number} already taken "
                    f"(attempt {attempt}/{NUMBER_ATTEMPTS})"
                )
                continue

            logger.info(f"Complaint {complaint_number} created by {created_by}")
            return await self.get_complaint_by_id(complaint.id)

        raise ComplaintNumberUnavailable(
            f"No free complaint number after {NUMBER_ATTEMPTS} attempts"
        )

    async def update_complaint(
        self,
        complaint: Complaint,
        data: ComplaintWrite,
        updated_by: uuid.UUID,
    ) -> Complaint:
        """
        Overwrite the editable fields of a complaint.

        Exactly one ComplaintAction is written with the change, in the same
        transaction. created_by_id is never touched.
        """
        previous_assignee = complaint.assigned_to_id

        for field, value in self._writable_values(data).items():
            setattr(complaint, field, value)
        complaint.updated_at = datetime.now(timezone.utc)

        self.db.add(ComplaintAction(
            complaint_id=complaint.id,
            user_id=updated_by,
            description=ACTION_UPDATED,
        ))
        self._notify_assignee(complaint, previous_assignee=previous_assignee, actor_id=updated_by)

        await self.db.commit()

        return await self.get_complaint_by_id(complaint.id)

    @staticmethod
    def _writable_values(data: ComplaintWrite) -> dict:
        return {
            "customer_name": data.customer_name,
            "customer_id": data.customer_id,
            "policy_number": data.policy_number,
            "policy_type": data.policy_type or DEFAULT_POLICY_TYPE,
            "description": data.description,
            "channel": data.channel or DEFAULT_CHANNEL,
            "status_id": data.reference_id("status_id"),
            "type_id": data.reference_id("type_id"),
            "branch_id": data.reference_id("branch_id"),
            "line_of_business_id": data.reference_id("line_of_business_id"),
            "assigned_to_id": data.reference_id("assigned_to_id"),
        }

    def _notify_assignee(
        self,
        complaint: Complaint,
        previous_assignee: Optional[uuid.UUID],
        actor_id: uuid.UUID,
    ) -> None:
        """Tell a newly assigned user about the complaint, unless they assigned it themselves."""
        assignee = complaint.assigned_to_id
        if assignee is None or assignee == previous_assignee or assignee == actor_id:
            return

        self.notifications.notify(
            user_id=assignee,
            title="Complaint assigned",
            message=(
                f"Complaint {complaint.complaint_number} for "
                f"{complaint.customer_name} has been assigned to you."
            ),
            complaint_id=complaint.id,
        )

    async def _generate_complaint_number(self) -> str:
        """Next free complaint number of the day: CMP-YYYYMMDD-NNNN."""
        prefix = f"CMP-{datetime.now(timezone.utc).strftime('%Y%m%d')}-"
        latest = await self.db.scalar(
            select(func.max(Complaint.complaint_number))
            .where(Complaint.complaint_number.like(f"{prefix}%"))
        )
        sequence = int(latest.rsplit("-", 1)[1]) + 1 if latest else 1
        return f"{prefix}{sequence:04d}"

    async def _number_taken(self, complaint_number: str) -> bool:
        existing = await self.db.scalar(
            select(Complaint.id).where(Complaint.complaint_number == complaint_number)
        )
        return existing is not None
