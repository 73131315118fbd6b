"""Authentication endpoints."""

from flask import Blueprint, g, jsonify

from taskboard.errors import InvalidCredentials
from taskboard.middleware.auth import token_required
from taskboard.routes.common import json_body
from taskboard.schemas import LoginSchema, RegisterSchema, UserSchema
from taskboard.services.auth import authenticate, generate_token, register_user
from taskboard.telemetry import get_meter, get_tracer


tracer = get_tracer(__name__)
meter = get_meter(__name__)

auth_attempts = meter.create_counter(
    name="auth.login.attempts",
    description="Login attempts",
    unit="1",
)

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _session_response(user) -> dict:
    return {
        "token": generate_token(user),
        "user": UserSchema(only=("id", "username")).dump(user),
    }


@auth_bp.route("/register", methods=["POST"])
def register():
    """Register a new user.

    Returns:
        JSON response with JWT token and user data.
    """
    with tracer.start_as_current_span("user.register") as span:
        data = RegisterSchema().load(json_body())

        user = register_user(data["username"], data["password"])

        span.set_attribute("user.id", user.id)
        return jsonify(_session_response(user))


@auth_bp.route("/login", methods=["POST"])
def login():
    """Authenticate user and return JWT token.

    Returns:
        JSON response with JWT token and user data.
    """
    with tracer.start_as_current_span("user.login") as span:
        data = LoginSchema().load(json_body())

        try:
            user = authenticate(data["username"], data["password"])
        except InvalidCredentials:
            auth_attempts.add(1, {"status": "invalid_credentials"})
            span.set_attribute("auth.status", "invalid_credentials")
            raise

        auth_attempts.add(1, {"status": "success"})
        span.set_attribute("user.id", user.id)
        span.set_attribute("auth.status", "success")

        return jsonify(_session_response(user))


@auth_bp.route("/me", methods=["GET"])
@token_required
def current_user():
    """Get current authenticated user.

    Returns:
        JSON response with user data.
    """
    return jsonify(UserSchema().dump(g.current_user))
