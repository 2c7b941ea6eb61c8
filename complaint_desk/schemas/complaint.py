from datetime import datetime
from typing import Optional, List
from uuid import UUID

from complaint_desk.db_types import parse_uuid
from complaint_desk.schemas.base import (
    BaseResponseSchema, BaseUpdateSchema, NamedRef, UserBrief,
)


# Fields that must be present and non-empty on create and update
REQUIRED_COMPLAINT_FIELDS = (
    "customer_name",
    "customer_id",
    "policy_number",
    "description",
    "type_id",
    "branch_id",
    "line_of_business_id",
    "status_id",
)

# Body fields that must name an existing row when set
REFERENCE_FIELDS = (
    "type_id",
    "status_id",
    "branch_id",
    "line_of_business_id",
    "assigned_to_id",
)


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ComplaintWrite(BaseUpdateSchema):
    """Body accepted by complaint create and update."""
    customer_name: Optional[str] = None
    customer_id: Optional[str] = None
    policy_number: Optional[str] = None
    policy_type: Optional[str] = None
    description: Optional[str] = None
    channel: Optional[str] = None
    # Ids stay strings here; they are parsed once the target complaint is known
    type_id: Optional[str] = None
    status_id: Optional[str] = None
    branch_id: Optional[str] = None
    line_of_business_id: Optional[str] = None
    assigned_to_id: Optional[str] = None

    def missing_fields(self) -> List[str]:
        """Names of required fields that are absent or blank."""
        missing = []
        for name in REQUIRED_COMPLAINT_FIELDS:
            if _is_blank(getattr(self, name)):
                missing.append(name)
        return missing

    def invalid_references(self) -> List[str]:
        """Names of id fields that are set but are not UUIDs."""
        return [
            name for name in REFERENCE_FIELDS
            if not _is_blank(getattr(self, name))
            and parse_uuid(getattr(self, name)) is None
        ]

    def reference_id(self, name: str) -> Optional[UUID]:
        """Parsed value of an id field; blank means unset."""
        value = getattr(self, name)
        if _is_blank(value):
            return None
        return parse_uuid(value)


class ComplaintCreate(ComplaintWrite):
    pass


class ComplaintUpdate(ComplaintWrite):
    pass


class ComplaintResponse(BaseResponseSchema):
    id: UUID
    complaint_number: str
    customer_name: str
    customer_id: str
    policy_number: str
    policy_type: str
    description: str
    channel: str

    status_id: UUID
    type_id: UUID
    branch_id: UUID
    line_of_business_id: UUID
    created_by_id: UUID
    assigned_to_id: Optional[UUID] = None

    status: NamedRef
    type: NamedRef
    branch: NamedRef
    line_of_business: NamedRef
    created_by: UserBrief
    assigned_to: Optional[UserBrief] = None

    created_at: datetime
    updated_at: datetime


class ComplaintListResponse(BaseResponseSchema):
    items: List[ComplaintResponse]
    total: int
    page: int
    size: int
    pages: int


class ComplaintActionResponse(BaseResponseSchema):
    id: UUID
    complaint_id: UUID
    description: str
    user: UserBrief
    created_at: datetime


class ComplaintSummary(BaseResponseSchema):
    """Short complaint reference embedded in notifications."""
    complaint_number: str
    customer_name: str

