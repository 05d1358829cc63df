"""
Token codec:
- HS256 access tokens (PyJWT) carrying user id, email and role
- opaque refresh secrets; only their SHA-256 digest is ever persisted

The codec is built from explicit settings at startup and never reads the
Flask config itself.
"""
from __future__ import annotations

import base64
import hashlib
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from utils.exceptions import ConfigError, TokenExpiredError, TokenInvalidError

ALGORITHM = "HS256"
DEFAULT_ISSUER = "bamboo-mapper"
REFRESH_SECRET_BYTES = 32
REQUIRED_CLAIMS = ["exp", "iat", "nbf", "sub", "iss", "jti"]


@dataclass(frozen=True)
class AccessClaims:
    user_id: str
    email: str
    role: str
    issued_at: datetime
    not_before: datetime
    expires_at: datetime
    subject: str
    issuer: str
    token_id: str


@dataclass(frozen=True)
class RefreshSecret:
    raw: str
    digest: str
    expires_at: datetime

    def __repr__(self):
        # keep the raw secret out of logs and tracebacks
        return f"<RefreshSecret digest={self.digest[:12]}... expires_at={self.expires_at.isoformat()}>"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _timestamp(value: datetime) -> int:
    return int(value.timestamp())


def _from_timestamp(value) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID)."""
    return uuid.uuid4().hex


def digest_of(raw_secret: str) -> str:
    """SHA-256 hex digest of a refresh secret. Deterministic and unsalted."""
    return hashlib.sha256(raw_secret.encode("utf-8")).hexdigest()


class TokenCodec:
    def __init__(
        self,
        secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        issuer: str = DEFAULT_ISSUER,
    ):
        if not secret:
            raise ConfigError("JWT secret must be configured")
        self._secret = secret
        self._access_ttl = access_ttl
        self._refresh_ttl = refresh_ttl
        self._issuer = issuer

    def __repr__(self):
        return f"<TokenCodec issuer={self._issuer!r} access_ttl={self._access_ttl} refresh_ttl={self._refresh_ttl}>"

    @property
    def access_ttl_seconds(self) -> int:
        return int(self._access_ttl.total_seconds())

    @property
    def refresh_ttl_seconds(self) -> int:
        return int(self._refresh_ttl.total_seconds())

    def issue_access(self, user_id: str, email: str, role: str, now: Optional[datetime] = None) -> str:
        """Sign a short-lived access token for the given identity."""
        now = now or utc_now()
        payload = {
            "user_id": str(user_id),
            "email": email,
            "role": role,
            "iat": _timestamp(now),
            "nbf": _timestamp(now),
            "exp": _timestamp(now + self._access_ttl),
            "iss": self._issuer,
            "sub": str(user_id),
            "jti": generate_jti(),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify_access(self, token: str, now: Optional[datetime] = None) -> AccessClaims:
        """
        Verify signature, algorithm and issuer, then the time window against `now`.
        Raises TokenExpiredError once exp has passed and TokenInvalidError for
        anything else (malformed, bad signature, unexpected alg, missing claims).
        """
        try:
            decoded = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                issuer=self._issuer,
                options={
                    "require": REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError() from exc

        try:
            claims = AccessClaims(
                user_id=str(decoded["user_id"]),
                email=str(decoded["email"]),
                role=str(decoded["role"]),
                issued_at=_from_timestamp(decoded["iat"]),
                not_before=_from_timestamp(decoded["nbf"]),
                expires_at=_from_timestamp(decoded["exp"]),
                subject=str(decoded["sub"]),
                issuer=str(decoded["iss"]),
                token_id=str(decoded["jti"]),
            )
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            raise TokenInvalidError() from exc

        now = now or utc_now()
        if now >= claims.expires_at:
            raise TokenExpiredError()
        if now < claims.not_before:
            raise TokenInvalidError()
        return claims

    def issue_refresh_secret(self, now: Optional[datetime] = None) -> RefreshSecret:
        """Generate a new opaque refresh secret, its digest and its expiry."""
        now = now or utc_now()
        raw = base64.urlsafe_b64encode(secrets.token_bytes(REFRESH_SECRET_BYTES)).decode("ascii")
        return RefreshSecret(raw=raw, digest=digest_of(raw), expires_at=now + self._refresh_ttl)

    def digest_of(self, raw_secret: str) -> str:
        return digest_of(raw_secret)
