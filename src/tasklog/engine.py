"""Task engine - orchestrates the event store and projections.

Writes append exactly one event and never look at current state.
Reads replay the whole log into a fresh TaskState.
"""

import logging
from datetime import datetime
from pathlib import Path

from .errors import TaskValidationError
from .events import EventStore
from .models import CreateEvent, DeleteEvent, Task, generate_id, iso_timestamp
from .schedule import TaskGroups, group_tasks
from .state import TaskState, project

logger = logging.getLogger(__name__)


def _text(value: str | None) -> str:
    return value if value is not None else ""


def task_metrics(tasks: list[Task]) -> dict:
    """Count tasks by kind (the /metrics payload, minus server fields)."""
    return {
        "total_tasks": len(tasks),
        "priority_tasks": sum(1 for t in tasks if t.priority),
        "regular_tasks": sum(1 for t in tasks if not t.priority),
        "tasks_with_dates": sum(1 for t in tasks if t.date),
        "tasks_with_descriptions": sum(1 for t in tasks if t.description),
    }


class TaskEngine:
    """Main entry point for task operations.

    Thread-safety: any number of threads may call into one engine; appends
    are serialized by the EventStore and reads take no lock.
    """

    def __init__(self, event_file: Path):
        self.event_store = EventStore(Path(event_file))
        self.event_store.ensure()

    # --- Writes ---

    def create_task(
        self,
        name: str | None,
        date: str | None = "",
        time: str | None = "",
        description: str | None = "",
        priority: bool = False,
    ) -> CreateEvent:
        """Validate and record a new task. Returns the appended event.

        Raises:
            TaskValidationError: name missing or blank
            StorageError: the log could not be written
        """
        name = (name or "").strip()
        if not name:
            raise TaskValidationError("Name is required.")

        priority = bool(priority)
        event = CreateEvent(
            id=generate_id(),
            name=name,
            date="" if priority else _text(date),
            time="" if priority else _text(time),
            description=_text(description),
            priority=priority,
            created_at=iso_timestamp(),
        )
        self.event_store.append(event)
        logger.info(f"Created task {event.id} (priority={priority})")
        return event

    def delete_task(self, task_id: str) -> DeleteEvent:
        """Record a deletion. Unknown ids are accepted (delete is idempotent).

        Raises:
            TaskValidationError: task_id missing or blank
            StorageError: the log could not be written
        """
        if not task_id or not task_id.strip():
            raise TaskValidationError("Task id is required.")

        event = DeleteEvent(id=task_id, deleted_at=iso_timestamp())
        self.event_store.append(event)
        logger.info(f"Deleted task {task_id}")
        return event

    # --- Reads ---

    def project(self) -> TaskState:
        """Replay the full log into a new TaskState."""
        return project(self.event_store.read_all())

    def list_tasks(self) -> list[Task]:
        """Current tasks in first-created order."""
        return self.project().list_tasks()

    def get_task(self, task_id: str) -> Task | None:
        return self.project().get(task_id)

    def groups(self, now: datetime | None = None) -> TaskGroups:
        """Current tasks split into priority/scheduled/active."""
        return group_tasks(self.list_tasks(), now)

    def metrics(self) -> dict:
        """Counters over the current task set."""
        return task_metrics(self.list_tasks())
