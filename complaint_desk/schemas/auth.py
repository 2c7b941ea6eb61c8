from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from complaint_desk.models.user import Role
from complaint_desk.schemas.base import BaseResponseSchema, NamedRef


class LoginRequest(BaseModel):
    """Login request schema."""
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")


class SessionClaims(BaseResponseSchema):
    """
    Identity carried inside the session token.

    Produced by the session issuer at login and decoded on every request;
    authorization decisions only ever look at this record.
    """
    id: UUID
    email: str
    name: str
    role: Role
    branch: Optional[NamedRef] = None
    line_of_business: Optional[NamedRef] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class SessionResponse(BaseModel):
    """Body returned by login and session lookup. The token itself only travels in the cookie."""
    user: SessionClaims
