"""Credential service: registration, login and JWT handling."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from taskboard.errors import ConflictError, InvalidCredentials
from taskboard.extensions import db
from taskboard.models import User


logger = logging.getLogger(__name__)


def generate_token(user: User) -> str:
    """Generate JWT token for user.

    Args:
        user: User to generate token for.

    Returns:
        JWT token string.
    """
    expiration_hours = current_app.config.get("JWT_EXPIRATION_HOURS", 24)
    secret_key = current_app.config["JWT_SECRET_KEY"]
    algorithm = current_app.config.get("JWT_ALGORITHM", "HS256")

    now = datetime.now(timezone.utc)
    payload = {
        "user_id": user.id,
        "username": user.username,
        "exp": now + timedelta(hours=expiration_hours),
        "iat": now,
    }

    return jwt.encode(payload, secret_key, algorithm=algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate JWT token.

    Args:
        token: JWT token string.

    Returns:
        Decoded token payload.

    Raises:
        jwt.InvalidTokenError: If token is invalid or expired.
    """
    secret_key = current_app.config["JWT_SECRET_KEY"]
    algorithm = current_app.config.get("JWT_ALGORITHM", "HS256")

    return jwt.decode(
        token, secret_key, algorithms=[algorithm], options={"require": ["exp", "iat"]}
    )


def register_user(username: str, password: str) -> User:
    """Create a new user account.

    Raises:
        ConflictError: If the username is already taken.
    """
    if db.session.query(User).filter(User.username == username).first():
        raise ConflictError()

    user = User(username=username)
    user.set_password(password)

    # The unique index still guards against a concurrent registration.
    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError() from None

    logger.info(f"User registered: {user.username}", extra={"user_id": user.id})
    return user


def authenticate(username: str, password: str) -> User:
    """Check a username/password pair.

    Raises:
        InvalidCredentials: If the user is unknown or the password is wrong.
    """
    user = db.session.query(User).filter(User.username == username).first()
    if not user:
        logger.warning(f"Login failed: user not found for {username}")
        raise InvalidCredentials()

    if not user.check_password(password):
        logger.warning(f"Login failed: invalid password for {username}")
        raise InvalidCredentials()

    logger.info(f"User logged in: {user.username}", extra={"user_id": user.id})
    return user
