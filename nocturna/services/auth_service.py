"""
Authentication service: registration, login and session lookup.

Service layer returns domain models and tokens only; cookies are the route
layer's concern. Failed logins never say whether the email or the password
was wrong.
"""

from datetime import UTC, datetime

from email_validator import EmailNotValidError, validate_email

from nocturna.auth.tokens import create_token
from nocturna.db.documents import DuplicateDocumentError
from nocturna.errors import (
    AuthenticationError,
    DuplicateEmailError,
    InvalidCredentialsError,
    ValidationFailed,
    VersionConflictError,
)
from nocturna.infrastructure.observability.logging import get_logger
from nocturna.models.domain.user_domain import SessionPayload, SessionUser, User
from nocturna.repositories.user_repository import UserRepository
from nocturna.security.passwords import hash_password, needs_rehash, validate_password, verify_password

logger = get_logger(__name__)


def _session_user(user: User) -> SessionUser:
    return SessionUser(id=user.id, email=user.email, name=user.name)


def _issue_token(user: User) -> str:
    return create_token(user.id, user.email, user.name)


async def register(email: str, password: str, name: str) -> tuple[SessionUser, str]:
    """
    Create an account and open a session for it.

    Returns:
        The public user and a fresh session token

    Raises:
        ValidationFailed: Missing field, malformed email or weak password
        DuplicateEmailError: The email is already registered
    """
    email = email.strip()
    name = name.strip()
    if not email or not password or not name:
        raise ValidationFailed("Email, password, and name are required")

    try:
        email = validate_email(email, check_deliverability=False).normalized.lower()
    except EmailNotValidError as e:
        raise ValidationFailed.for_field("email", "Invalid email format") from e

    problems = validate_password(password)
    if problems:
        raise ValidationFailed(
            "Password does not meet requirements",
            errors=[{"field": "password", "message": problem} for problem in problems],
        )

    if await UserRepository.get_by_email(email) is not None:
        logger.info("Registration rejected, email taken")
        raise DuplicateEmailError()

    try:
        user = await UserRepository.create(
            User(email=email, name=name, password_hash=hash_password(password))
        )
    except DuplicateDocumentError as e:
        # Lost a race with a concurrent registration of the same address
        raise DuplicateEmailError() from e

    logger.info("User registered", user_id=user.id)
    return _session_user(user), _issue_token(user)


async def login(email: str, password: str) -> tuple[SessionUser, str]:
    """
    Check credentials and open a session.

    Raises:
        ValidationFailed: Missing email or password
        InvalidCredentialsError: Unknown email or wrong password, indistinguishably
    """
    if not email.strip() or not password:
        raise ValidationFailed("Email and password are required")

    user = await UserRepository.get_by_email(email.strip())
    if not verify_password(user.password_hash if user else None, password):
        logger.info("Login failed")
        raise InvalidCredentialsError()

    user.last_login_at = datetime.now(UTC)
    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
    try:
        user = await UserRepository.save(user)
    except VersionConflictError:
        # A simultaneous login by the same user already wrote its timestamp
        logger.info("Concurrent login, keeping the other login's timestamp", user_id=user.id)
        user = await UserRepository.get(user.id) or user

    logger.info("User logged in", user_id=user.id)
    return _session_user(user), _issue_token(user)


async def current_user(session: SessionPayload) -> SessionUser:
    """Re-read the session's user; a deleted account ends the session."""
    user = await UserRepository.get(session.user_id)
    if user is None:
        logger.warning("Session refers to a missing user", user_id=session.user_id)
        raise AuthenticationError()
    return _session_user(user)
