from datetime import datetime

from pydantic import BaseModel

from nocturna.models.domain.base import DocumentModel


class User(DocumentModel):
    """
    Registered account.

    ``email`` is stored lower-cased. ``password_hash`` never leaves the
    service layer.
    """

    email: str
    name: str
    password_hash: str
    email_verified: bool = False
    image: str | None = None
    last_login_at: datetime | None = None


class SessionUser(BaseModel):
    """The user as carried by the session token and returned by the API."""

    id: str
    email: str
    name: str | None = None


class SessionPayload(BaseModel):
    user_id: str
    email: str
    name: str | None = None
    expires_at: datetime
