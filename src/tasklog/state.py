"""Task state materialization from events.

Replays the event log to build the current task set. Every read rebuilds
from scratch; nothing here survives between calls.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from pydantic import ValidationError

from .models import CreateEvent, DeleteEvent, Task, decode_event

logger = logging.getLogger(__name__)


@dataclass
class TaskState:
    """Materialized task set.

    ``tasks`` keeps first-seen order: re-creating an id overwrites its
    fields in place, deleting and re-creating moves it to the end.
    """

    tasks: dict[str, Task] = field(default_factory=dict)  # id -> Task
    applied: int = 0
    skipped: int = 0

    def list_tasks(self) -> list[Task]:
        return list(self.tasks.values())

    def get(self, task_id: str) -> Task | None:
        return self.tasks.get(task_id)


def apply_event(state: TaskState, event: CreateEvent | DeleteEvent) -> None:
    """Apply a single event to state (mutates in place)."""
    if isinstance(event, CreateEvent):
        state.tasks[event.id] = event.to_task()
    elif isinstance(event, DeleteEvent):
        # Unknown or already-deleted ids are a no-op
        state.tasks.pop(event.id, None)
    state.applied += 1


def materialize(events: Iterable[CreateEvent | DeleteEvent]) -> TaskState:
    """Replay decoded events to build current state."""
    state = TaskState()
    for event in events:
        apply_event(state, event)
    return state


def parse_event(line: str) -> CreateEvent | DeleteEvent:
    """Decode one log line. Raises pydantic.ValidationError if malformed."""
    return decode_event(line)


def project(lines: Iterable[str]) -> TaskState:
    """Decode and replay raw log lines, skipping malformed ones.

    A line that is not a valid event (bad JSON, unknown type, missing
    fields, a torn write left by a crash) is logged and skipped; the
    remaining lines still apply.
    """
    state = TaskState()
    for index, line in enumerate(lines, start=1):
        try:
            event = parse_event(line)
        except ValidationError as e:
            state.skipped += 1
            logger.warning(f"Skipping malformed event #{index}: {e.error_count()} error(s)")
            continue
        apply_event(state, event)

    if state.skipped:
        logger.warning(
            f"Projected {len(state.tasks)} tasks from {state.applied} events, "
            f"skipped {state.skipped} malformed lines"
        )
    return state
