"""Task CRUD endpoints."""

import logging

from flask import Blueprint, g, jsonify

from taskboard.middleware.auth import token_required
from taskboard.middleware.metrics import tag_request
from taskboard.routes.common import json_body
from taskboard.schemas import TaskCreateSchema, TaskSchema, TaskStatusSchema, TaskUpdateSchema
from taskboard.services import tasks as task_service
from taskboard.telemetry import get_meter, get_tracer


logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)
meter = get_meter(__name__)

tasks_created = meter.create_counter(
    name="tasks.created",
    description="Tasks created",
    unit="1",
)

tasks_moved = meter.create_counter(
    name="tasks.moved",
    description="Tasks moved between board columns",
    unit="1",
)

tasks_bp = Blueprint("tasks", __name__, url_prefix="/tasks")


@tasks_bp.route("", methods=["GET"])
@token_required
def list_tasks():
    """List the caller's tasks ordered by status, then position.

    Returns:
        JSON array of tasks.
    """
    tasks = task_service.list_tasks(g.current_user.id)
    logger.debug(f"Listed {len(tasks)} tasks", extra={"user_id": g.current_user.id})
    return jsonify(TaskSchema(many=True).dump(tasks))


@tasks_bp.route("", methods=["POST"])
@token_required
def create_task():
    """Create a new task.

    Returns:
        JSON response with created task.
    """
    with tracer.start_as_current_span("task.create") as span:
        data = TaskCreateSchema().load(json_body())

        task = task_service.create_task(g.current_user.id, data)

        span.set_attribute("user.id", g.current_user.id)
        span.set_attribute("task.id", task.id)
        span.set_attribute("task.status", task.status)
        tasks_created.add(1, {"status": task.status})
        tag_request(task_status=task.status, task_list=task.category)

        return jsonify(TaskSchema().dump(task)), 201


@tasks_bp.route("/<int:task_id>", methods=["PUT"])
@token_required
def update_task(task_id: int):
    """Update the supplied fields of a task.

    Args:
        task_id: Task id.

    Returns:
        JSON response with updated task.
    """
    with tracer.start_as_current_span("task.update") as span:
        span.set_attribute("task.id", task_id)
        data = TaskUpdateSchema().load(json_body())

        task = task_service.update_task(g.current_user.id, task_id, data)
        tag_request(task_status=task.status)

        return jsonify(TaskSchema().dump(task))


@tasks_bp.route("/<int:task_id>/status", methods=["PATCH"])
@token_required
def update_task_status(task_id: int):
    """Move a task to another column.

    Args:
        task_id: Task id.

    Returns:
        JSON response with updated task.
    """
    with tracer.start_as_current_span("task.update_status") as span:
        span.set_attribute("task.id", task_id)
        data = TaskStatusSchema().load(json_body())

        task = task_service.update_task_status(
            g.current_user.id,
            task_id,
            data["status"],
            order=data.get("order"),
            deadline=data.get("deadline"),
            category=data.get("category"),
        )

        span.set_attribute("task.status", task.status)
        tasks_moved.add(1, {"status": task.status})
        tag_request(task_status=task.status)

        return jsonify(TaskSchema().dump(task))


@tasks_bp.route("/<int:task_id>", methods=["DELETE"])
@token_required
def delete_task(task_id: int):
    """Delete a task.

    Args:
        task_id: Task id.

    Returns:
        Empty response with 204 status.
    """
    with tracer.start_as_current_span("task.delete") as span:
        span.set_attribute("task.id", task_id)

        task_service.delete_task(g.current_user.id, task_id)

        return "", 204
