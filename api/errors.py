import logging

from flask import jsonify, current_app
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from utils.exceptions import MapperError

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    415: "UNSUPPORTED_MEDIA_TYPE",
    422: "VALIDATION_ERROR",
}


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    """Every failure leaves the API as {"error", "message", "status"[, "details"]}."""

    # abort() from views and the auth gate; description is the public message
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 500
        code = HTTP_ERROR_CODES.get(status, "INTERNAL_ERROR" if status >= 500 else "BAD_REQUEST")
        if status >= 500:
            logger.error("HTTP %s: %s", status, err.description)
        return error_response(code, err.description or err.name, status)

    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # field -> [messages]
        return error_response("VALIDATION_ERROR", "Validation failed", 422, details=err.messages)

    @app.errorhandler(MapperError)
    def handle_mapper_error(err: MapperError):
        if err.status >= 500:
            logger.exception("Internal error", exc_info=err)
        return error_response(err.code, err.message, err.status)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        raw = str(getattr(err, "orig", err))
        lowered = raw.lower()
        logger.warning("Integrity error: %s", raw)
        details = {"db_error": raw} if current_app.debug else None

        if "unique" in lowered:
            return error_response("CONFLICT", "Resource already exists.", 409, details=details)
        if "foreign key" in lowered:
            return error_response("BAD_REQUEST", "Referenced resource does not exist.", 400, details=details)
        if "check constraint" in lowered or "constraint failed" in lowered:
            return error_response("BAD_REQUEST", "Value violates a constraint.", 400, details=details)
        return error_response("BAD_REQUEST", "Integrity error.", 400, details=details)

    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        details = None
        if current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
