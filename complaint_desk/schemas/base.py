"""
Base Schema Classes for Pydantic Models

All API payloads use camelCase keys on the wire; models are declared in
snake_case and accept either form on input.

RULE: All response schemas that use `from_attributes=True` MUST inherit from BaseResponseSchema.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseResponseSchema(BaseModel):
    """
    Base class for all response schemas that read from ORM models.

    Usage:
        class BranchBrief(BaseResponseSchema):
            id: UUID
            name: str
    """
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        # Allow population by field name or alias
        populate_by_name=True,
    )


class BaseCreateSchema(BaseModel):
    """
    Base class for create/input schemas.

    Unknown keys are ignored so older clients keep working.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore',
    )


class BaseUpdateSchema(BaseCreateSchema):
    """
    Base class for update schemas.

    Fields are optional at the schema level; handlers decide which are required.
    """


class NamedRef(BaseResponseSchema):
    """Denormalized reference to a lookup row (status, type, branch...)."""
    id: UUID
    name: str


class UserBrief(BaseResponseSchema):
    id: UUID
    name: str


class MessageResponse(BaseModel):
    message: str
