"""Service modules."""

from taskboard.services.auth import authenticate, decode_token, generate_token, register_user


__all__ = ["generate_token", "decode_token", "register_user", "authenticate"]
