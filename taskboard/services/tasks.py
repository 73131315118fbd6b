"""Task persistence scoped to the owning user.

Every query here filters on ``user_id``; a task that belongs to somebody
else is reported exactly like one that does not exist.
"""

import logging
from typing import Any

from taskboard.errors import NotFound
from taskboard.extensions import db
from taskboard.models import Task
from taskboard.models.base import utcnow
from taskboard.models.task import DEFAULT_LIST


logger = logging.getLogger(__name__)

# Fields a partial update may replace.
UPDATABLE_FIELDS = ("title", "description", "status", "order", "deadline", "category")


def list_tasks(user_id: int) -> list[Task]:
    """Return all of the user's tasks ordered by column, then position."""
    return (
        db.session.query(Task)
        .filter(Task.user_id == user_id)
        .order_by(Task.status, Task.order, Task.id)
        .all()
    )


def get_task(user_id: int, task_id: int) -> Task:
    """Load one of the user's tasks.

    Raises:
        NotFound: If no task with this id belongs to the user.
    """
    task = db.session.query(Task).filter(Task.id == task_id, Task.user_id == user_id).first()
    if task is None:
        raise NotFound("Task not found or unauthorized")
    return task


def create_task(user_id: int, fields: dict[str, Any]) -> Task:
    """Insert a task for the user.

    ``title`` and ``status`` are expected to be validated already. Without an
    explicit ``order`` the task is appended to the end of its column.
    """
    now = utcnow()
    status = fields["status"]

    task = Task(
        user_id=user_id,
        title=fields["title"],
        description=fields.get("description") or "",
        status=status,
        deadline=fields.get("deadline"),
        category=fields.get("category") or DEFAULT_LIST,
        created_at=fields.get("created_at") or now,
        updated_at=fields.get("updated_at") or now,
    )
    order = fields.get("order")
    task.order = order if order is not None else Task.tail_order(user_id, status)

    db.session.add(task)
    db.session.commit()

    logger.info(f"Task created: {task.id} in {task.status}", extra={"user_id": user_id})
    return task


def update_task(user_id: int, task_id: int, fields: dict[str, Any]) -> Task:
    """Replace the supplied fields of a task and keep the rest.

    Absent or null fields are left untouched. ``updated_at`` is always
    refreshed.

    Raises:
        NotFound: If no task with this id belongs to the user.
    """
    task = get_task(user_id, task_id)

    for name in UPDATABLE_FIELDS:
        value = fields.get(name)
        if value is not None:
            setattr(task, name, value)
    task.updated_at = utcnow()

    db.session.commit()

    logger.info(f"Task updated: {task.id}", extra={"user_id": user_id})
    return task


def update_task_status(
    user_id: int,
    task_id: int,
    status: str,
    order: int | None = None,
    deadline=None,
    category: str | None = None,
) -> Task:
    """Move a task to a column.

    When ``order`` is omitted and the column changes, the database appends
    the task after the last card of the destination column. Omitting it for
    the current column keeps the position.

    Raises:
        NotFound: If no task with this id belongs to the user.
    """
    task = get_task(user_id, task_id)
    previous_status = task.status

    if order is not None:
        task.order = order
    elif status != previous_status:
        task.order = Task.tail_order(user_id, status)
    task.status = status
    if deadline is not None:
        task.deadline = deadline
    if category is not None:
        task.category = category
    task.updated_at = utcnow()

    db.session.commit()

    logger.info(
        f"Task moved: {task.id} {previous_status} -> {task.status}",
        extra={"user_id": user_id},
    )
    return task


def delete_task(user_id: int, task_id: int) -> None:
    """Remove one of the user's tasks.

    Raises:
        NotFound: If no task with this id belongs to the user.
    """
    task = get_task(user_id, task_id)

    db.session.delete(task)
    db.session.commit()

    logger.info(f"Task deleted: {task_id}", extra={"user_id": user_id})
