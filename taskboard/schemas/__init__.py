"""Marshmallow schemas for serialization and validation."""

from taskboard.schemas.task import (
    TaskCreateSchema,
    TaskSchema,
    TaskStatusSchema,
    TaskUpdateSchema,
)
from taskboard.schemas.user import (
    LoginSchema,
    RegisterSchema,
    UserSchema,
)


__all__ = [
    "UserSchema",
    "RegisterSchema",
    "LoginSchema",
    "TaskSchema",
    "TaskCreateSchema",
    "TaskUpdateSchema",
    "TaskStatusSchema",
]
