"""Board view logic over an already-fetched task collection.

Everything here is a pure function of the task list the client holds;
nothing touches the API. Tasks are the JSON objects returned by
``GET /tasks`` (``id``, ``status``, ``order``, ``title``, ``description``,
``deadline``, ``list`` ...).
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable, Mapping

from taskboard.models.task import TaskStatus


TaskData = Mapping[str, Any]

STATUSES: tuple[str, ...] = tuple(TaskStatus.values())

DATE_FILTERS = ("today", "next7days", "overdue")


def parse_deadline(value: Any) -> date | None:
    """Return the deadline as a date, or None when absent or unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


# -------------------- columns and ordering --------------------


def group_by_status(tasks: Iterable[TaskData]) -> dict[str, list[TaskData]]:
    """Split tasks into the three board columns, each sorted by position."""
    columns: dict[str, list[TaskData]] = {status: [] for status in STATUSES}
    for task in tasks:
        if task.get("status") in columns:
            columns[task["status"]].append(task)
    for cards in columns.values():
        cards.sort(key=lambda t: (t.get("order", 0), t.get("id", 0)))
    return columns


def next_order(tasks: Iterable[TaskData], status: str) -> int:
    """Position that appends a card to the end of ``status``.

    This is the count of cards currently in the column, as seen by the
    caller. Two clients working from stale views can compute the same value.
    """
    return sum(1 for task in tasks if task.get("status") == status)


def plan_move(tasks: Iterable[TaskData], task_id: int, status: str) -> dict[str, Any] | None:
    """Build the status-change payload for dropping a card on a column.

    Returns None when the task is unknown or already in that column,
    mirroring a drop that does not change columns.

    Raises:
        ValueError: If ``status`` is not a board column.
    """
    if status not in STATUSES:
        raise ValueError(f"Invalid status: {status}")

    tasks = list(tasks)
    task = next((t for t in tasks if t.get("id") == task_id), None)
    if task is None or task.get("status") == status:
        return None

    return {"status": status, "order": next_order(tasks, status)}


# -------------------- filters --------------------


def search(tasks: Iterable[TaskData], term: str) -> list[TaskData]:
    """Case-insensitive substring match on title or description."""
    needle = (term or "").lower()
    if not needle:
        return list(tasks)
    return [
        task
        for task in tasks
        if needle in (task.get("title") or "").lower()
        or needle in (task.get("description") or "").lower()
    ]


def filter_by_date(
    tasks: Iterable[TaskData], mode: str | None, today: date | None = None
) -> list[TaskData]:
    """Filter on deadline.

    Modes:
        today: due today.
        next7days: due within the six days after today.
        overdue: due before today.

    Tasks without a deadline never match a date filter. ``None`` disables
    the filter.
    """
    if mode is None:
        return list(tasks)
    if mode not in DATE_FILTERS:
        raise ValueError(f"Unknown date filter: {mode}")

    today = today or date.today()
    if mode == "today":
        start, end = today, today
    elif mode == "next7days":
        start, end = today + timedelta(days=1), today + timedelta(days=6)
    else:
        start, end = date.min, today - timedelta(days=1)

    matched = []
    for task in tasks:
        deadline = parse_deadline(task.get("deadline"))
        if deadline is not None and start <= deadline <= end:
            matched.append(task)
    return matched


def filter_by_list(tasks: Iterable[TaskData], label: str | None) -> list[TaskData]:
    """Exact match on the category label; ``None`` disables the filter."""
    if label is None:
        return list(tasks)
    return [task for task in tasks if task.get("list") == label]


def apply_filters(
    tasks: Iterable[TaskData],
    search_term: str = "",
    date_filter: str | None = None,
    list_filter: str | None = None,
    today: date | None = None,
) -> list[TaskData]:
    """Compose the date, category and search filters."""
    filtered = filter_by_date(tasks, date_filter, today=today)
    filtered = filter_by_list(filtered, list_filter)
    return search(filtered, search_term)


def tasks_in_list(tasks: Iterable[TaskData], label: str) -> list[TaskData]:
    """Content of the category side panel."""
    return filter_by_list(tasks, label)


# -------------------- statistics --------------------


@dataclass
class DayStats:
    """Tasks due on a single day."""

    day: date
    tasks: list[TaskData] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.tasks)


def deadline_stats(
    tasks: Iterable[TaskData], today: date | None = None, days: int = 7
) -> list[DayStats]:
    """Count tasks due on each of the next ``days`` days, starting today."""
    today = today or date.today()
    buckets = [DayStats(day=today + timedelta(days=offset)) for offset in range(days)]
    by_day = {bucket.day: bucket for bucket in buckets}

    for task in tasks:
        deadline = parse_deadline(task.get("deadline"))
        if deadline in by_day:
            by_day[deadline].tasks.append(task)

    for bucket in buckets:
        bucket.tasks.sort(key=lambda t: (str(t.get("deadline")), t.get("id", 0)))
    return buckets


def status_counts(tasks: Iterable[TaskData]) -> dict[str, int]:
    """Number of cards per column."""
    return {status: len(cards) for status, cards in group_by_status(tasks).items()}
