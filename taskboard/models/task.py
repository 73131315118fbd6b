"""Task model and board status enum."""

import enum
from datetime import date, datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text, func, select
from sqlalchemy.orm import Mapped, aliased, mapped_column, relationship

from taskboard.extensions import db
from taskboard.models.base import utcnow


class TaskStatus(str, enum.Enum):
    """Board columns, in display order."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


DEFAULT_LIST = "personal"


class Task(db.Model):
    """A single card on a user's board."""

    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint(
            "status IN ('todo', 'in_progress', 'done')", name="ck_tasks_status"
        ),
        CheckConstraint('"order" >= 0', name="ck_tasks_order_non_negative"),
        Index("ix_tasks_user_status_order", "user_id", "status", "order"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=TaskStatus.TODO.value)
    order: Mapped[int] = mapped_column("order", default=0, nullable=False)
    deadline: Mapped[date | None] = mapped_column(nullable=True)
    category: Mapped[str] = mapped_column("list", String(50), default=DEFAULT_LIST)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    owner: Mapped["User"] = relationship("User", back_populates="tasks")  # noqa: F821

    @staticmethod
    def tail_order(user_id: int, status: str):
        """SQL expression for the next free position at the end of a column.

        Evaluated by the database inside the INSERT/UPDATE that uses it, so
        the position is read and written in one statement.

        Args:
            user_id: Owner of the column.
            status: Column to append to.

        Returns:
            Scalar subquery yielding ``max(order) + 1``, or 0 for an empty column.
        """
        peer = aliased(Task)
        return (
            select(func.coalesce(func.max(peer.order) + 1, 0))
            .where(peer.user_id == user_id, peer.status == status)
            .scalar_subquery()
        )

    def __repr__(self) -> str:
        return f"<Task {self.id} {self.status}#{self.order}>"
