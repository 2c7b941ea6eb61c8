from datetime import datetime, timezone
from typing import Optional, Any
import logging

from fastapi import Response
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError

from complaint_desk.config import SessionConfig, settings
from complaint_desk.schemas.auth import SessionClaims


logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    default="bcrypt",
    bcrypt__rounds=12,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Malformed or unknown hashes count as a mismatch.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception:
        return False


def dummy_verify() -> None:
    """Burn the same time as a real verification when no user matched."""
    pwd_context.dummy_verify()


def get_password_hash(password: str) -> str:
    """Hash a password with bcrypt."""
    return pwd_context.hash(password)


class SessionIssuer:
    """
    Encodes session claims into a signed, stateless token and reads them back.

    There is no server-side revocation: a token stays valid until it expires
    or the signing secret is rotated.
    """

    def __init__(self, config: SessionConfig):
        self.config = config

    def issue(self, claims: SessionClaims, now: Optional[datetime] = None) -> str:
        """
        Create a session token for the given claims.

        Args:
            claims: Verified identity of the user
            now: Issue time, defaults to the current time

        Returns:
            Encoded JWT string
        """
        issued_at = now or datetime.now(timezone.utc)
        identity = claims.model_dump(mode="json", by_alias=True, exclude={"id"})

        to_encode: dict[str, Any] = {
            "sub": str(claims.id),
            "iat": issued_at,
            "exp": issued_at + self.config.max_age,
            **identity,
        }
        return jwt.encode(
            to_encode,
            self.config.secret_key,
            algorithm=self.config.algorithm
        )

    def decode(self, token: str) -> Optional[SessionClaims]:
        """
        Verify a token's signature and expiry and return its claims.

        Returns:
            SessionClaims or None if the token is invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self.config.secret_key,
                algorithms=[self.config.algorithm]
            )
        except JWTError as e:
            logger.warning(f"Session token rejected: {e}")
            return None

        try:
            return SessionClaims.model_validate({**payload, "id": payload.get("sub")})
        except ValidationError:
            logger.warning("Session token carries malformed claims")
            return None

    def set_cookie(self, response: Response, token: str) -> None:
        """Attach the session cookie to a response."""
        response.set_cookie(
            key=self.config.cookie_name,
            value=token,
            max_age=int(self.config.max_age.total_seconds()),
            path="/",
            domain=self.config.domain,
            secure=self.config.secure,
            httponly=True,
            samesite="lax",
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(
            key=self.config.cookie_name,
            path="/",
            domain=self.config.domain,
            secure=self.config.secure,
            httponly=True,
            samesite="lax",
        )


session_issuer = SessionIssuer(SessionConfig.from_settings(settings))
