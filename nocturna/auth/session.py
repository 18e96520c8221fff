"""
session.py
----------
Purpose:
    Cookie transport for the session token and the FastAPI dependency that
    gates protected routes.
"""

from fastapi import Request, Response

from nocturna.auth.tokens import verify_token
from nocturna.config import settings
from nocturna.errors import AuthenticationError
from nocturna.models.domain.user_domain import SessionPayload


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.session_max_age_seconds(),
        path="/",
        httponly=True,
        secure=settings.is_production(),
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value="",
        max_age=0,
        path="/",
        httponly=True,
        secure=settings.is_production(),
        samesite="lax",
    )


def session_dependency(request: Request) -> SessionPayload:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise AuthenticationError()
    session = verify_token(token)
    request.state.user_id = session.user_id
    return session
