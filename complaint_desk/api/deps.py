from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyCookie
from sqlalchemy.ext.asyncio import AsyncSession

from complaint_desk.database import get_db
from complaint_desk.core.security import session_issuer
from complaint_desk.schemas.auth import SessionClaims


# Session cookie security scheme
session_cookie = APIKeyCookie(
    name=session_issuer.config.cookie_name,
    auto_error=False,
)


async def get_current_session(
    token: Annotated[Optional[str], Depends(session_cookie)],
) -> SessionClaims:
    """
    Dependency to get the claims of the current session.

    Decodes the session cookie only; no database access happens here, so an
    unauthenticated request is rejected before any store lookup.
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )

    claims = session_issuer.decode(token)
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )

    return claims


# Type aliases for cleaner endpoint signatures
CurrentSession = Annotated[SessionClaims, Depends(get_current_session)]
DB = Annotated[AsyncSession, Depends(get_db)]
