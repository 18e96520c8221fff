"""
Password hashing and strength policy.

Hashes are Argon2id. Every module that stores or checks a password goes
through this module so the hasher parameters stay in one place.
"""

import re

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

PASSWORD_MIN_LENGTH = 8

PASSWORD_HASHER = PasswordHasher(
    time_cost=3,
    memory_cost=65536,  # 64 MB in KB
    parallelism=4,
    hash_len=32,
    salt_len=16,
)

# Checked against when the email is unknown so both failure paths cost the same
_DUMMY_HASH = PASSWORD_HASHER.hash("nocturna-dummy-password")

_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"\d"), "Password must contain at least one number"),
    (re.compile(r"[^A-Za-z0-9]"), "Password must contain at least one special character"),
)


def validate_password(password: str) -> list[str]:
    """Return the list of unmet requirements; empty when the password is acceptable."""
    errors = []
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    errors.extend(message for pattern, message in _RULES if not pattern.search(password))
    return errors


def hash_password(password: str) -> str:
    return PASSWORD_HASHER.hash(password)


def verify_password(password_hash: str | None, password: str) -> bool:
    """
    Check ``password`` against ``password_hash``.

    A missing hash is verified against a throwaway one and reported as a
    mismatch.
    """
    try:
        PASSWORD_HASHER.verify(password_hash or _DUMMY_HASH, password)
    except (VerificationError, InvalidHashError):
        return False
    return password_hash is not None


def needs_rehash(password_hash: str) -> bool:
    return PASSWORD_HASHER.check_needs_rehash(password_hash)
