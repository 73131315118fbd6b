"""Database models."""

from taskboard.models.task import Task, TaskStatus
from taskboard.models.user import User


__all__ = ["User", "Task", "TaskStatus"]
