"""HTTP client for the taskboard API with a whole-collection task cache.

The cache holds the last ``GET /tasks`` result. Any successful mutation
drops it, so the next read refetches everything. Failed calls leave the
cache as it was. There are no retries.
"""

import logging
import os
from datetime import date
from typing import Any

import requests

from taskboard import board


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = float(os.getenv("TASKBOARD_CLIENT_TIMEOUT", "10"))


class ApiError(Exception):
    """A request failed or the API answered with an error status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message if status_code is None else f"{status_code}: {message}")


class NotAuthenticated(ApiError):
    """A task call was attempted without a session token."""

    def __init__(self, message: str = "User not authenticated: No token available"):
        super().__init__(message)


def _encode(fields: dict[str, Any]) -> dict[str, Any]:
    return {
        key: value.isoformat() if isinstance(value, date) else value
        for key, value in fields.items()
    }


class TaskboardClient:
    """Client-side data layer for one user session.

    Args:
        base_url: API root, e.g. ``http://localhost:3000``.
        token: Existing session token, if any.
        user_id: Id of the user the token belongs to.
        session: Object with a ``requests.Session``-compatible ``request``.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        user_id: int | None = None,
        session: Any = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.user_id = user_id
        self.session = session or requests.Session()
        self.timeout = timeout
        self._cache: list[dict[str, Any]] | None = None

    # -------------------- session --------------------

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def register(self, username: str, password: str) -> dict[str, Any]:
        """Create an account and keep its session token."""
        data = self._request(
            "POST", "/auth/register", json={"username": username, "password": password}, auth=False
        )
        self._start_session(data)
        return data["user"]

    def login(self, username: str, password: str) -> dict[str, Any]:
        """Log in and keep the session token."""
        data = self._request(
            "POST", "/auth/login", json={"username": username, "password": password}, auth=False
        )
        self._start_session(data)
        return data["user"]

    def logout(self) -> None:
        """Forget the token, user id and cached tasks."""
        self.token = None
        self.user_id = None
        self._cache = None

    def _start_session(self, data: dict[str, Any]) -> None:
        self.token = data["token"]
        self.user_id = data["user"]["id"]
        self._cache = None

    # -------------------- reads --------------------

    @property
    def is_stale(self) -> bool:
        return self._cache is None

    def tasks(self) -> list[dict[str, Any]]:
        """Cached task collection, fetched on first use or after a mutation."""
        if self._cache is None:
            return self.refresh()
        return self._cache

    def refresh(self) -> list[dict[str, Any]]:
        """Fetch the task collection and replace the cache."""
        self._cache = self._request("GET", "/tasks")
        return self._cache

    def invalidate(self) -> None:
        self._cache = None

    def board(self) -> dict[str, list[dict[str, Any]]]:
        """Cached tasks grouped into board columns."""
        return board.group_by_status(self.tasks())

    # -------------------- mutations --------------------

    def add_task(self, title: str, status: str = "todo", **fields: Any) -> dict[str, Any]:
        """Create a task. Without ``order`` the API appends it to its column."""
        payload = _encode({"title": title, "status": status, **fields})
        task = self._request("POST", "/tasks", json=payload)
        self.invalidate()
        return task

    def edit_task(self, task_id: int, **fields: Any) -> dict[str, Any]:
        """Replace the given fields of a task."""
        task = self._request("PUT", f"/tasks/{task_id}", json=_encode(fields))
        self.invalidate()
        return task

    def change_status(self, task_id: int, status: str, **fields: Any) -> dict[str, Any]:
        """Move a task to ``status`` through the status-change endpoint."""
        payload = _encode({"status": status, **fields})
        task = self._request("PATCH", f"/tasks/{task_id}/status", json=payload)
        self.invalidate()
        return task

    def move_task(self, task_id: int, status: str) -> dict[str, Any] | None:
        """Drop a card on a column.

        The new position is the current size of the destination column in
        the cached view. Returns None when nothing had to change.
        """
        payload = board.plan_move(self.tasks(), task_id, status)
        if payload is None:
            return None
        return self.change_status(task_id, payload["status"], order=payload["order"])

    def remove_task(self, task_id: int) -> None:
        self._request("DELETE", f"/tasks/{task_id}")
        self.invalidate()

    # -------------------- transport --------------------

    def _request(self, method: str, path: str, json: Any = None, auth: bool = True) -> Any:
        headers = {"Content-Type": "application/json"}
        if auth:
            if not self.token:
                raise NotAuthenticated()
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as err:
            logger.error(f"{method} {path} failed: {err}")
            raise ApiError(str(err)) from err

        if not response.ok:
            raise ApiError(_error_message(response), response.status_code)

        if response.status_code == 204:
            return None
        return response.json()


def _error_message(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or "Request failed"
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.text or "Request failed"
