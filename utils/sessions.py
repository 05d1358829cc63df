"""
Session manager: registration, login, refresh-token rotation and logout.

Every session is one refresh-token row keyed by the digest of its secret:
  ACTIVE --refresh--> REVOKED   (the secret is single-use)
  ACTIVE --logout---> REVOKED   (all of the user's sessions at once)
  ACTIVE --time-----> EXPIRED

Access tokens cannot be revoked: after logout the last access token stays
valid for at most the access TTL.

Storage errors are not caught here; they reach the HTTP layer as 500s.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from models.user import User, DEFAULT_ROLE
from utils.exceptions import (
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    TokenInvalidError,
)
from utils.security import DUMMY_PASSWORD_HASH, hash_password, verify_password
from utils.tokens import AccessClaims, TokenCodec, utc_now

logger = logging.getLogger(__name__)

TOKEN_TYPE = "Bearer"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


@dataclass(frozen=True)
class ClientInfo:
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int
    user: User
    token_type: str = TOKEN_TYPE

    def __repr__(self):
        return f"<TokenPair user_id={self.user.id} expires_in={self.expires_in}>"


class SessionManager:
    def __init__(self, storage, codec: TokenCodec):
        self.storage = storage
        self.codec = codec

    def register(self, email: str, name: str, password: str) -> User:
        """Create a user with the default role. Raises EmailTakenError on duplicates."""
        user = self.storage.create_user(
            email=normalize_email(email),
            password_hash=hash_password(password),
            name=name.strip(),
            role=DEFAULT_ROLE,
        )
        logger.info("Registered user %s", user.id)
        return user

    def login(self, email: str, password: str, client: Optional[ClientInfo] = None) -> TokenPair:
        user = self.storage.get_user_by_email(normalize_email(email))
        # Unknown emails still pay for one hash verification
        password_hash = user.password_hash if user is not None else DUMMY_PASSWORD_HASH
        password_ok = verify_password(password, password_hash)
        if user is None or not password_ok:
            logger.info("Rejected login attempt")
            raise InvalidCredentialsError()

        pair = self._issue_pair(user, client)
        logger.info("User %s logged in", user.id)
        return pair

    def refresh(self, raw_refresh_token: str, client: Optional[ClientInfo] = None) -> TokenPair:
        now = utc_now()
        token_hash = self.codec.digest_of(raw_refresh_token or "")
        claimed = self.storage.claim_refresh_token(token_hash, now)
        if claimed is None:
            logger.warning("Rejected refresh token %s...", token_hash[:12])
            raise InvalidRefreshTokenError()

        user = self.storage.get_user_by_id(claimed.user_id)
        if user is None:
            raise InvalidRefreshTokenError()

        pair = self._issue_pair(user, client, now)
        logger.info("Rotated refresh token for user %s", user.id)
        return pair

    def logout(self, user_id: str) -> int:
        revoked = self.storage.revoke_all_refresh_tokens(user_id)
        logger.info("User %s logged out, %d session(s) revoked", user_id, revoked)
        return revoked

    def current_user(self, claims: AccessClaims) -> User:
        user = self.storage.get_user_by_id(claims.user_id)
        if user is None:
            raise TokenInvalidError("User not found")
        return user

    def _issue_pair(self, user: User, client: Optional[ClientInfo], now: Optional[datetime] = None) -> TokenPair:
        now = now or utc_now()
        client = client or ClientInfo()
        access_token = self.codec.issue_access(user.id, user.email, user.role, now)
        secret = self.codec.issue_refresh_secret(now)
        self.storage.create_refresh_token(
            user_id=user.id,
            token_hash=secret.digest,
            expires_at=secret.expires_at,
            user_agent=client.user_agent,
            ip_address=client.ip_address,
        )
        return TokenPair(
            access_token=access_token,
            refresh_token=secret.raw,
            expires_in=self.codec.access_ttl_seconds,
            user=user,
        )
