# nocturna/models/api/auth_response.py
from pydantic import BaseModel

from nocturna.models.domain.user_domain import SessionUser


class AuthResponse(BaseModel):
    """Response for /auth/register, /auth/login and /auth/logout"""

    success: bool = True
    message: str
    user: SessionUser | None = None


class SessionResponse(BaseModel):
    """Response for GET /auth/session"""

    success: bool = True
    user: SessionUser
