import logging

from fastapi import APIRouter, HTTPException, Response, status
from sqlalchemy.exc import SQLAlchemyError

from complaint_desk.api.deps import DB, CurrentSession
from complaint_desk.core.security import session_issuer
from complaint_desk.schemas.auth import LoginRequest, SessionResponse
from complaint_desk.schemas.base import MessageResponse
from complaint_desk.services.auth_service import AuthService


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


@router.post("/login", response_model=SessionResponse)
async def login(
    data: LoginRequest,
    response: Response,
    db: DB,
):
    """
    Authenticate with email and password.

    On success the session token is set as an httpOnly cookie; it is never
    returned in the body.
    """
    auth_service = AuthService(db)

    try:
        user = await auth_service.authenticate_user(data.email, data.password)
    except SQLAlchemyError:
        logger.exception("Authentication error")
        user = None

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    claims = auth_service.build_claims(user)
    session_issuer.set_cookie(response, session_issuer.issue(claims))
    logger.info(f"User {user.id} signed in")

    return SessionResponse(user=claims)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    """Clear the session cookie."""
    session_issuer.clear_cookie(response)
    return MessageResponse(message="Signed out")


@router.get("/session", response_model=SessionResponse)
async def get_session(claims: CurrentSession):
    """Get the identity carried by the current session."""
    return SessionResponse(user=claims)
