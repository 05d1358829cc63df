from __future__ import annotations
from functools import wraps
from flask import request, g, abort, current_app
from utils.exceptions import TokenExpiredError, TokenInvalidError

BEARER_SCHEME = "bearer"


def get_token_codec():
    return current_app.extensions["token_codec"]


def get_session_manager():
    return current_app.extensions["session_manager"]


def jwt_required():
    """
    Require `Authorization: Bearer <access token>`.
    On success the verified AccessClaims are stored in g.claims.
    Missing header, expired token and any other failure answer 401 with
    different messages, so clients know whether to refresh or log in again.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = request.headers.get("Authorization", "")
            if not auth:
                abort(401, description="Authorization header required")

            scheme, sep, token = auth.partition(" ")
            if not sep or scheme.lower() != BEARER_SCHEME:
                abort(401, description="Invalid authorization header format")

            try:
                claims = get_token_codec().verify_access(token.strip())
            except TokenExpiredError:
                abort(401, description="Token has expired")
            except TokenInvalidError:
                abort(401, description="Invalid token")

            g.claims = claims
            return fn(*args, **kwargs)

        return wrapper

    return decorator
