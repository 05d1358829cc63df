"""
Domain errors raised by the authentication core and the storage layer.

Each error carries the HTTP status it maps to and a public message that is
safe to show to clients. Input validation errors are marshmallow's
ValidationError and are not redefined here.
"""


class MapperError(Exception):
    status = 500
    code = "INTERNAL_ERROR"
    message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class AuthError(MapperError):
    status = 401
    code = "UNAUTHORIZED"
    message = "Unauthorized"


class TokenInvalidError(AuthError):
    message = "Invalid token"


class TokenExpiredError(AuthError):
    message = "Token has expired"


class InvalidCredentialsError(AuthError):
    message = "Invalid email or password"


class InvalidRefreshTokenError(AuthError):
    message = "Invalid or expired refresh token"


class ConflictError(MapperError):
    status = 409
    code = "CONFLICT"
    message = "Conflict"


class EmailTakenError(ConflictError):
    message = "Email already registered"


class InternalError(MapperError):
    pass


class HashingError(InternalError):
    message = "Failed to process credentials"


class ConfigError(InternalError):
    message = "Invalid configuration"
