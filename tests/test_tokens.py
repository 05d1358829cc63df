import base64
import json
from datetime import timedelta

import jwt
import pytest

from utils.exceptions import ConfigError, TokenExpiredError, TokenInvalidError
from utils.tokens import TokenCodec, digest_of, utc_now

SECRET = "unit-test-secret-with-at-least-32-bytes!!"
USER_ID = "8f14e45f-ceea-467f-a8f5-1b1c9a5e2a10"


@pytest.fixture
def codec():
    return TokenCodec(SECRET)


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def _payload(now, **extra):
    payload = {
        "user_id": USER_ID,
        "email": "a@b.com",
        "role": "user",
        "iat": int(now.timestamp()),
        "nbf": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=15)).timestamp()),
        "iss": "bamboo-mapper",
        "sub": USER_ID,
        "jti": "abc123",
    }
    payload.update(extra)
    return payload


def test_empty_secret_is_rejected_at_construction():
    with pytest.raises(ConfigError):
        TokenCodec("")


def test_issue_and_verify_access(codec):
    now = utc_now()
    token = codec.issue_access(USER_ID, "a@b.com", "admin", now)
    claims = codec.verify_access(token, now)

    assert claims.user_id == USER_ID
    assert claims.subject == USER_ID
    assert claims.email == "a@b.com"
    assert claims.role == "admin"
    assert claims.issuer == "bamboo-mapper"
    assert claims.expires_at - claims.issued_at == timedelta(minutes=15)
    assert claims.not_before == claims.issued_at


def test_access_tokens_are_unique(codec):
    now = utc_now()
    assert codec.issue_access(USER_ID, "a@b.com", "user", now) != codec.issue_access(USER_ID, "a@b.com", "user", now)


def test_already_expired_token_reports_expired():
    codec = TokenCodec(SECRET, access_ttl=timedelta(hours=-1))
    token = codec.issue_access(USER_ID, "a@b.com", "user")
    with pytest.raises(TokenExpiredError):
        codec.verify_access(token)


def test_token_expires_at_exp(codec):
    now = utc_now()
    token = codec.issue_access(USER_ID, "a@b.com", "user", now)
    codec.verify_access(token, now + timedelta(minutes=14))
    with pytest.raises(TokenExpiredError):
        codec.verify_access(token, now + timedelta(minutes=16))


def test_token_not_yet_valid_is_invalid(codec):
    now = utc_now()
    token = codec.issue_access(USER_ID, "a@b.com", "user", now)
    with pytest.raises(TokenInvalidError):
        codec.verify_access(token, now - timedelta(minutes=5))


def test_wrong_secret_is_invalid(codec):
    other = TokenCodec("another-secret-with-at-least-32-bytes!!")
    token = other.issue_access(USER_ID, "a@b.com", "user")
    with pytest.raises(TokenInvalidError):
        codec.verify_access(token)


def test_expired_token_with_bad_signature_is_invalid(codec):
    other = TokenCodec("another-secret-with-at-least-32-bytes!!", access_ttl=timedelta(hours=-1))
    token = other.issue_access(USER_ID, "a@b.com", "user")
    with pytest.raises(TokenInvalidError):
        codec.verify_access(token)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "Bearer x.y.z"])
def test_malformed_tokens_are_invalid(codec, token):
    with pytest.raises(TokenInvalidError):
        codec.verify_access(token)


def test_alg_none_is_rejected(codec):
    header = _b64({"alg": "none", "typ": "JWT"})
    token = f"{header}.{_b64(_payload(utc_now()))}."
    with pytest.raises(TokenInvalidError):
        codec.verify_access(token)


def test_other_hmac_algorithm_is_rejected(codec):
    token = jwt.encode(_payload(utc_now()), SECRET, algorithm="HS512")
    with pytest.raises(TokenInvalidError):
        codec.verify_access(token)


def test_wrong_issuer_is_rejected(codec):
    token = jwt.encode(_payload(utc_now(), iss="someone-else"), SECRET, algorithm="HS256")
    with pytest.raises(TokenInvalidError):
        codec.verify_access(token)


def test_missing_identity_claim_is_rejected(codec):
    payload = _payload(utc_now())
    del payload["email"]
    token = jwt.encode(payload, SECRET, algorithm="HS256")
    with pytest.raises(TokenInvalidError):
        codec.verify_access(token)


def test_digest_is_deterministic():
    assert digest_of("raw-secret") == digest_of("raw-secret")
    assert digest_of("raw-secret") != digest_of("raw-secret2")
    assert len(digest_of("raw-secret")) == 64


def test_refresh_secret(codec):
    now = utc_now()
    first = codec.issue_refresh_secret(now)
    second = codec.issue_refresh_secret(now)

    assert first.raw != second.raw
    assert len(base64.urlsafe_b64decode(first.raw)) == 32
    assert first.digest == codec.digest_of(first.raw)
    assert first.digest != first.raw
    assert first.expires_at == now + timedelta(days=7)
    assert first.raw not in repr(first)


def test_ttl_seconds_defaults(codec):
    assert codec.access_ttl_seconds == 900
    assert codec.refresh_ttl_seconds == 604800
