"""Domain errors and Flask error handlers with OpenTelemetry trace context."""

import logging
from typing import Any

from flask import Flask, jsonify
from marshmallow import ValidationError as SchemaValidationError
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from werkzeug.exceptions import HTTPException


logger = logging.getLogger(__name__)


class TaskboardError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    error_type = "server_error"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(TaskboardError):
    """A required field is missing or a field value is invalid."""

    status_code = 400
    error_type = "validation"
    default_message = "Validation failed"


class Unauthorized(TaskboardError):
    """Missing or invalid bearer token, or no user behind it."""

    status_code = 401
    error_type = "authentication"
    default_message = "Unauthorized"


class NotFound(TaskboardError):
    """No row matches the id for the calling user."""

    status_code = 404
    error_type = "not_found"
    default_message = "Not found"


class ConflictError(TaskboardError):
    """Username already taken."""

    # The public API reports duplicates as a plain bad request.
    status_code = 400
    error_type = "conflict"
    default_message = "Username already exists"


class InvalidCredentials(TaskboardError):
    """Unknown username or wrong password."""

    status_code = 400
    error_type = "authentication"
    default_message = "Invalid username or password"


def error_response(message: str, status_code: int, **extra: Any) -> tuple:
    """Create error response with trace context.

    Args:
        message: Error message.
        status_code: HTTP status code.
        **extra: Additional body fields.

    Returns:
        Tuple of (response, status_code).
    """
    response: dict[str, Any] = {
        "error": message,
        "status": status_code,
    }
    response.update(extra)

    # Add trace ID for debugging
    span = trace.get_current_span()
    span_context = span.get_span_context()
    if span_context.is_valid:
        response["trace_id"] = format(span_context.trace_id, "032x")

    return jsonify(response), status_code


def register_error_handlers(app: Flask) -> None:
    """Register error handlers on Flask app.

    Args:
        app: Flask application instance.
    """

    @app.errorhandler(TaskboardError)
    def handle_taskboard_error(error: TaskboardError):
        span = trace.get_current_span()
        if span.is_recording():
            span.set_attribute("error.type", error.error_type)
            span.set_attribute("http.status_code", error.status_code)

        extra = {"fields": error.details} if error.details else {}
        return error_response(error.message, error.status_code, **extra)

    @app.errorhandler(SchemaValidationError)
    def handle_schema_error(error: SchemaValidationError):
        span = trace.get_current_span()
        if span.is_recording():
            span.set_attribute("error.type", "validation")

        return error_response("Validation failed", 400, fields=error.messages)

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        messages = {
            400: "Bad request",
            401: "Unauthorized",
            403: "Forbidden",
            404: "Not found",
            405: "Method not allowed",
        }
        status_code = error.code or 500
        return error_response(messages.get(status_code, error.name), status_code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        span = trace.get_current_span()
        if span.is_recording():
            span.set_status(Status(StatusCode.ERROR, str(error)))
            span.record_exception(error)
            span.set_attribute("error.type", "unhandled_exception")

        logger.exception(f"Unhandled exception: {error}")
        return error_response("Internal server error", 500, detail=str(error))
