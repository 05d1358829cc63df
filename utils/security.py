"""
Password hashing helpers (argon2id via argon2-cffi).
"""
from __future__ import annotations

import secrets

from argon2 import PasswordHasher
from argon2.exceptions import HashingError as Argon2HashingError
from argon2.exceptions import InvalidHashError, VerificationError

from utils.exceptions import HashingError

ph = PasswordHasher()

# Comparison target for logins with an unknown email, so that path does the
# same amount of hashing work as a wrong password.
DUMMY_PASSWORD_HASH = ph.hash(secrets.token_urlsafe(32))


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    try:
        return ph.hash(password)
    except Argon2HashingError as exc:
        raise HashingError() from exc


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False
