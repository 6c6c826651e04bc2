"""Scheduling rules: split tasks into priority, scheduled and active groups.

Due times are local wall-clock times (no timezone normalization):
- "2025-01-15" + "14:30" -> datetime(2025, 1, 15, 14, 30)
- missing date or time -> no due time
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from dateutil import parser as dateparser
from dateutil.relativedelta import relativedelta

from .models import Task

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_LOCAL_EPOCH = datetime(1970, 1, 1)


def _to_int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


def task_due(task: Task) -> datetime | None:
    """Combine a task's date and time into a naive local datetime.

    Returns None when either part is empty or the date is not three
    numbers. Hour/minute parts that are not numbers count as 0.
    Out-of-range parts roll over the way a browser Date does:
    2025-02-30 is March 2nd and month 13 is January of the next year.
    """
    if not task.date or not task.time:
        return None

    date_parts = [_to_int(p) for p in task.date.split("-")]
    if len(date_parts) != 3 or None in date_parts:
        return None
    year, month, day = date_parts

    time_parts = task.time.split(":")
    hour = _to_int(time_parts[0]) or 0
    minute = (_to_int(time_parts[1]) if len(time_parts) > 1 else None) or 0

    try:
        return (
            datetime(year, 1, 1)
            + relativedelta(months=month - 1)
            + timedelta(days=day - 1, hours=hour, minutes=minute)
        )
    except (ValueError, OverflowError):
        return None


def _due_ordinal(task: Task) -> float:
    """Due time as seconds since the (local) epoch, 0 when there is none."""
    due = task_due(task)
    return (due - _LOCAL_EPOCH).total_seconds() if due is not None else 0.0


def _created_ordinal(task: Task) -> float:
    try:
        created = dateparser.isoparse(task.created_at)
    except (ValueError, OverflowError):
        return 0.0
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return (created - _EPOCH).total_seconds()


@dataclass
class TaskGroups:
    """Disjoint partition of a task set at one instant."""

    priority: list[Task] = field(default_factory=list)
    scheduled: list[Task] = field(default_factory=list)
    active: list[Task] = field(default_factory=list)


def group_tasks(tasks: list[Task], now: datetime | None = None) -> TaskGroups:
    """Partition tasks relative to ``now`` (naive local time).

    - priority: every priority task, newest first
    - scheduled: due strictly after now, soonest first
    - active: the rest, latest due first, dateless tasks last
    """
    if now is None:
        now = datetime.now()

    groups = TaskGroups()
    for task in tasks:
        if task.priority:
            groups.priority.append(task)
            continue
        due = task_due(task)
        if due is not None and due > now:
            groups.scheduled.append(task)
        else:
            groups.active.append(task)

    groups.scheduled.sort(key=lambda t: task_due(t))
    groups.active.sort(key=_due_ordinal, reverse=True)
    groups.priority.sort(key=_created_ordinal, reverse=True)
    return groups


def scheduled_view(tasks: list[Task], now: datetime | None = None) -> list[Task]:
    """Tasks for the "Scheduled" list."""
    return group_tasks(tasks, now).scheduled


def dashboard_view(tasks: list[Task], now: datetime | None = None) -> list[Task]:
    """Tasks for the "Dashboard": priority pinned above active."""
    groups = group_tasks(tasks, now)
    return groups.priority + groups.active


def due_tasks(tasks: list[Task], now: datetime | None = None) -> list[Task]:
    """Non-priority tasks whose due time has arrived (notification candidates)."""
    if now is None:
        now = datetime.now()
    due = []
    for task in tasks:
        if task.priority:
            continue
        when = task_due(task)
        if when is not None and when <= now:
            due.append(task)
    return due
