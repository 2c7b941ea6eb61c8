from typing import Optional
import logging

from sqlalchemy import select
from sqlalchemy.orm import joinedload
from sqlalchemy.ext.asyncio import AsyncSession

from complaint_desk.models.user import User
from complaint_desk.core.security import verify_password, dummy_verify
from complaint_desk.schemas.auth import SessionClaims
from complaint_desk.schemas.base import NamedRef


logger = logging.getLogger(__name__)


class AuthService:
    """Credential verification for the login endpoint."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def authenticate_user(
        self,
        email: str,
        password: str
    ) -> Optional[User]:
        """
        Authenticate a user by email and password.

        Unknown email, wrong password and inactive account all return None,
        so callers cannot tell them apart.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            User object if authentication successful, None otherwise
        """
        if not email or not password:
            return None

        stmt = (
            select(User)
            .options(
                joinedload(User.branch),
                joinedload(User.line_of_business),
            )
            .where(User.email == email.lower())
        )
        result = await self.db.execute(stmt)
        user = result.scalar_one_or_none()

        if user is None:
            dummy_verify()
            return None

        if not verify_password(password, user.password_hash):
            return None

        if not user.is_active:
            return None

        return user

    @staticmethod
    def build_claims(user: User) -> SessionClaims:
        """Claims embedded in the session token for an authenticated user."""
        return SessionClaims(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            branch=NamedRef.model_validate(user.branch) if user.branch else None,
            line_of_business=(
                NamedRef.model_validate(user.line_of_business)
                if user.line_of_business else None
            ),
        )
