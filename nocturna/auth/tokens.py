"""
tokens.py
---------
Purpose:
    Issue and verify the signed session token (HS256).

Notes:
    - Payload carries userId, email, name and an ISO ``expiresAt`` alongside
      the registered ``iat``/``exp`` claims.
    - Tokens are stateless: logout clears the cookie but a copied token
      stays valid until ``exp``.
"""

from datetime import UTC, datetime, timedelta

import jwt

from nocturna.config import settings
from nocturna.errors import AuthenticationError
from nocturna.infrastructure.observability.logging import get_logger
from nocturna.models.domain.user_domain import SessionPayload

logger = get_logger(__name__)

ALGORITHM = "HS256"
SECRET_MIN_LENGTH = 32


class TokenConfigError(RuntimeError):
    """Raised when the signing secret is missing or too weak."""


def _secret() -> str:
    secret = settings.JWT_SECRET
    if not secret:
        raise TokenConfigError("JWT_SECRET is not configured")
    if len(secret) < SECRET_MIN_LENGTH:
        raise TokenConfigError("JWT_SECRET is too short; use at least 32 characters")
    return secret


def create_token(user_id: str, email: str, name: str | None = None, *, now: datetime | None = None) -> str:
    issued_at = now or datetime.now(UTC)
    expires_at = issued_at + timedelta(days=settings.SESSION_TTL_DAYS)
    claims = {
        "userId": user_id,
        "email": email,
        "name": name,
        "expiresAt": expires_at.isoformat(),
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(claims, _secret(), algorithm=ALGORITHM)


def verify_token(token: str) -> SessionPayload:
    """
    Decode a session token.

    Raises:
        AuthenticationError: Bad signature, malformed or expired token
    """
    try:
        claims = jwt.decode(
            token,
            _secret(),
            algorithms=[ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
        return SessionPayload(
            user_id=claims["userId"],
            email=claims["email"],
            name=claims.get("name"),
            expires_at=claims["expiresAt"],
        )
    except jwt.ExpiredSignatureError as e:
        logger.info("Session token expired")
        raise AuthenticationError() from e
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        logger.warning("Session token rejected", error_type=type(e).__name__)
        raise AuthenticationError() from e
