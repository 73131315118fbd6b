"""JWT authentication middleware."""

import logging
from functools import wraps
from typing import Callable, ParamSpec, TypeVar

import jwt
from flask import g, request

from taskboard.errors import Unauthorized
from taskboard.extensions import db
from taskboard.models import User
from taskboard.services.auth import decode_token


P = ParamSpec("P")
T = TypeVar("T")

logger = logging.getLogger(__name__)


def _bearer_token() -> str:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")

    if scheme != "Bearer" or not token.strip():
        raise Unauthorized("No token provided")

    return token.strip()


def token_required(f: Callable[P, T]) -> Callable[P, T]:
    """Decorator to require valid JWT token.

    Sets g.current_user if token is valid.
    Raises Unauthorized (401) if the token is missing, invalid, expired,
    or does not point at an existing user.
    """

    @wraps(f)
    def decorated(*args: P.args, **kwargs: P.kwargs) -> T:
        token = _bearer_token()

        try:
            payload = decode_token(token)
        except jwt.InvalidTokenError as err:
            logger.info(f"Token verification failed: {err}")
            raise Unauthorized("Unauthorized: Invalid token") from err

        user_id = payload.get("user_id")
        if not user_id:
            raise Unauthorized("Unauthorized: No user ID found")

        user = db.session.get(User, user_id)
        if not user:
            raise Unauthorized("Unauthorized: User not found")

        g.current_user = user
        return f(*args, **kwargs)

    return decorated
