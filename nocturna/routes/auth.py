"""
auth.py
-------
Purpose:
    Registration, login, logout and session lookup.

Notes:
    - The session token travels only in the HttpOnly ``session`` cookie.
    - Logout clears the cookie; the token itself stays valid until it expires.
"""

from fastapi import APIRouter, Depends, Response, status

from nocturna.auth.session import clear_session_cookie, session_dependency, set_session_cookie
from nocturna.infrastructure.observability.logging import get_logger
from nocturna.models.api.auth_request import LoginRequest, RegisterRequest
from nocturna.models.api.auth_response import AuthResponse, SessionResponse
from nocturna.models.domain.user_domain import SessionPayload
from nocturna.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, response: Response):
    """
    Create an account and sign it in.

    Raises:
        400: Missing field, invalid email, weak password or email already registered
    """
    user, token = await auth_service.register(payload.email, payload.password, payload.name)
    set_session_cookie(response, token)
    return AuthResponse(message="Registration successful", user=user)


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, response: Response):
    """
    Raises:
        400: Email or password missing
        401: Invalid email or password
    """
    user, token = await auth_service.login(payload.email, payload.password)
    set_session_cookie(response, token)
    return AuthResponse(message="Login successful", user=user)


@router.post("/logout", response_model=AuthResponse)
async def logout(response: Response):
    clear_session_cookie(response)
    logger.info("Session cookie cleared")
    return AuthResponse(message="Logout successful")


@router.get("/session", response_model=SessionResponse)
async def get_session(session: SessionPayload = Depends(session_dependency)):
    """Return the signed-in user, or 401 "Not authenticated"."""
    user = await auth_service.current_user(session)
    return SessionResponse(user=user)
