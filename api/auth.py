"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout
- GET  /auth/me

Access tokens are short-lived HS256 JWTs. Refresh tokens are opaque random
secrets; only their SHA-256 digest is stored, and each one can be used once
(every refresh rotates it). Logout revokes every refresh token of the user.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g

from models.schemas.user import (
    RegisterSchema,
    LoginSchema,
    RefreshSchema,
    UserOutSchema,
    TokenPairOutSchema,
)
from utils.decorators import jwt_required, get_session_manager
from utils.sessions import ClientInfo

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
user_out_schema = UserOutSchema()
token_pair_out_schema = TokenPairOutSchema()


def client_ip() -> str:
    """First hop of X-Forwarded-For, then X-Real-IP, then the socket address."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",", 1)[0].strip()
    real_ip = request.headers.get("X-Real-IP", "")
    if real_ip:
        return real_ip.strip()
    return request.remote_addr or ""


def client_info() -> ClientInfo:
    return ClientInfo(
        user_agent=request.headers.get("User-Agent") or None,
        ip_address=client_ip() or None,
    )


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [email, name, password]
          properties:
            email: { type: string }
            name: { type: string, maxLength: 100 }
            password: { type: string, minLength: 8 }
    responses:
      201:
        description: Created (password is never returned)
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = register_schema.load(payload)

    user = get_session_manager().register(
        email=data["email"],
        name=data["name"],
        password=data["password"],
    )
    return jsonify(
        {
            "message": "User registered successfully",
            "data": user_out_schema.dump(user),
        }
    ), 201


@bp.post("/login")
def login():
    """
    Login: return access_token and refresh_token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [email, password]
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens and the user)
      401:
        description: Invalid email or password
    """
    payload = request.get_json(silent=True) or {}
    data = login_schema.load(payload)

    pair = get_session_manager().login(data["email"], data["password"], client_info())
    body = token_pair_out_schema.dump(pair)
    body["user"] = user_out_schema.dump(pair.user)
    return jsonify({"message": "Login successful", "data": body}), 200


@bp.post("/refresh")
def refresh():
    """
    Exchange a refresh token for a new access/refresh pair (rotation).
    The presented refresh token is revoked and cannot be used again.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           required: [refresh_token]
           properties:
             refresh_token: { type: string }
    responses:
      200:
        description: OK (returns a new token pair)
      401:
        description: Invalid or expired refresh token
    """
    payload = request.get_json(silent=True) or {}
    data = refresh_schema.load(payload)

    pair = get_session_manager().refresh(data["refresh_token"], client_info())
    return jsonify(
        {
            "message": "Token refreshed successfully",
            "data": token_pair_out_schema.dump(pair),
        }
    ), 200


@bp.get("/me")
@jwt_required()
def me():
    """
    Current user
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: The authenticated user
      401:
        description: Unauthorized
    """
    user = get_session_manager().current_user(g.claims)
    return jsonify({"data": user_out_schema.dump(user)}), 200


@bp.post("/logout")
@jwt_required()
def logout():
    """
    Logout: revokes every refresh token of the user.
    The access token used for this call stays valid until it expires.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Sessions revoked
      401:
        description: Unauthorized
    """
    revoked = get_session_manager().logout(g.claims.user_id)
    return jsonify(
        {
            "message": "Logged out successfully",
            "data": {"revoked_sessions": revoked},
        }
    ), 200
