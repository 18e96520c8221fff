from datetime import UTC, datetime, timedelta

import jwt
import pytest

from nocturna.auth import tokens
from nocturna.errors import AuthenticationError


def test_round_trip_carries_identity_and_expiry():
    issued = datetime.now(UTC)
    token = tokens.create_token("user-1", "ana@nocturna.org", "Ana", now=issued)

    session = tokens.verify_token(token)

    assert session.user_id == "user-1"
    assert session.email == "ana@nocturna.org"
    assert session.name == "Ana"
    assert abs(session.expires_at - (issued + timedelta(days=7))) < timedelta(seconds=1)


def test_token_is_hs256():
    token = tokens.create_token("user-1", "ana@nocturna.org")

    assert jwt.get_unverified_header(token)["alg"] == "HS256"
    claims = jwt.decode(token, options={"verify_signature": False})
    assert {"userId", "email", "name", "expiresAt", "iat", "exp"} <= set(claims)


def test_expired_token_is_rejected():
    token = tokens.create_token("user-1", "ana@nocturna.org", now=datetime.now(UTC) - timedelta(days=8))

    with pytest.raises(AuthenticationError):
        tokens.verify_token(token)


def test_tampered_token_is_rejected():
    token = tokens.create_token("user-1", "ana@nocturna.org")
    forged = jwt.encode(
        jwt.decode(token, options={"verify_signature": False}),
        "another-secret-that-is-also-quite-long",
        algorithm="HS256",
    )

    with pytest.raises(AuthenticationError):
        tokens.verify_token(forged)


def test_garbage_is_rejected():
    with pytest.raises(AuthenticationError):
        tokens.verify_token("not.a.token")


def test_short_secret_is_a_configuration_error(monkeypatch):
    monkeypatch.setattr("nocturna.auth.tokens.settings.JWT_SECRET", "short")

    with pytest.raises(tokens.TokenConfigError):
        tokens.create_token("user-1", "ana@nocturna.org")


def test_missing_secret_is_a_configuration_error(monkeypatch):
    monkeypatch.setattr("nocturna.auth.tokens.settings.JWT_SECRET", None)

    with pytest.raises(tokens.TokenConfigError):
        tokens.create_token("user-1", "ana@nocturna.org")
