"""CORS headers for the browser board frontend."""

from flask import Flask, current_app, request


ALLOWED_METHODS = "GET, POST, PUT, PATCH, DELETE, OPTIONS"
ALLOWED_HEADERS = "Authorization, Content-Type"


def register_cors_headers(app: Flask) -> None:
    """Register CORS handling on Flask app.

    Only origins listed in ``CORS_ORIGINS`` get the allow headers. Preflight
    ``OPTIONS`` requests are answered by Flask's automatic OPTIONS handling.

    Args:
        app: Flask application instance.
    """

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if not origin or origin not in current_app.config.get("CORS_ORIGINS", []):
            return response

        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Methods"] = ALLOWED_METHODS
        response.headers["Access-Control-Allow-Headers"] = ALLOWED_HEADERS
        response.headers["Vary"] = "Origin"
        return response
