"""Request metrics for the board API.

Every API call is counted and timed under its route pattern. Task routes can
add their own attributes (the column a task landed in, for example) through
:func:`tag_request`; they are merged into the recorded attribute set.
"""

import time
from typing import Any

from flask import Flask, g, request

from taskboard.telemetry import HEALTH_PATHS, get_meter


def tag_request(**attributes: Any) -> None:
    """Attach task attributes to the metrics recorded for this request."""
    tags = g.setdefault("metric_attributes", {})
    tags.update({key: str(value) for key, value in attributes.items() if value is not None})


def request_attributes(response) -> dict[str, str]:
    """Build the attribute set for the current request and its response."""
    # Route pattern keeps task ids out of the attribute set
    route = request.url_rule.rule if request.url_rule else request.path

    attributes = {
        "method": request.method,
        "route": route,
        "status": str(response.status_code),
        "authenticated": "true" if "current_user" in g else "false",
    }
    attributes.update(g.get("metric_attributes", {}))
    return attributes


def register_metrics_middleware(app: Flask) -> None:
    """Count and time every API request except health checks and preflights."""
    meter = get_meter(__name__)

    api_requests = meter.create_counter(
        name="taskboard.api.requests",
        description="Board API requests",
        unit="1",
    )

    api_duration = meter.create_histogram(
        name="taskboard.api.duration_ms",
        description="Board API request duration in milliseconds",
        unit="ms",
    )

    @app.before_request
    def start_timer() -> None:
        g.request_start_time = time.perf_counter()

    @app.after_request
    def record_request(response):
        if request.path in HEALTH_PATHS or request.method == "OPTIONS":
            return response

        start_time = g.get("request_start_time")
        duration_ms = (time.perf_counter() - start_time) * 1000 if start_time else 0

        attributes = request_attributes(response)
        api_requests.add(1, attributes)
        api_duration.record(duration_ms, attributes)

        return response
