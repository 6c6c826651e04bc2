"""Tests for due-time parsing and dashboard grouping."""

from datetime import datetime

import pytest

from tasklog.models import Task
from tasklog.schedule import dashboard_view, due_tasks, group_tasks, scheduled_view, task_due

NOW = datetime(2025, 6, 1, 12, 0)


def task(id, date="", time="", priority=False, created_at="2025-01-01T00:00:00.000Z"):
    return Task(id=id, name=id, date=date, time=time, priority=priority, created_at=created_at)


# --- task_due ---


def test_task_due_combines_date_and_time():
    assert task_due(task("a", "2025-01-15", "14:30")) == datetime(2025, 1, 15, 14, 30)


@pytest.mark.parametrize(
    "date,time",
    [
        ("", ""),
        ("2025-01-15", ""),
        ("", "14:30"),
        ("tomorrow", "10:00"),
        ("2025-01", "10:00"),
    ],
)
def test_task_due_unparseable(date, time):
    assert task_due(task("a", date, time)) is None


def test_task_due_rolls_over_out_of_range_parts():
    assert task_due(task("a", "2025-02-30", "10:00")) == datetime(2025, 3, 2, 10, 0)
    assert task_due(task("a", "2025-13-01", "08:00")) == datetime(2026, 1, 1, 8, 0)
    assert task_due(task("a", "2025-01-31", "24:30")) == datetime(2025, 2, 1, 0, 30)
    assert task_due(task("a", "2025-00-10", "10:00")) == datetime(2024, 12, 10, 10, 0)


def test_task_due_lenient_time_parts():
    """Non-numeric hour/minute parts count as zero."""
    assert task_due(task("a", "2025-01-15", "9")) == datetime(2025, 1, 15, 9, 0)
    assert task_due(task("a", "2025-01-15", "xx:yy")) == datetime(2025, 1, 15, 0, 0)


# --- grouping ---


def test_priority_group_ignores_dates_and_sorts_newest_first():
    old = task("old", priority=True, created_at="2025-01-01T00:00:00.000Z")
    new = task("new", priority=True, created_at="2025-03-01T00:00:00.000Z")
    groups = group_tasks([old, new], NOW)
    assert [t.id for t in groups.priority] == ["new", "old"]
    assert groups.scheduled == []
    assert groups.active == []


def test_future_tasks_are_scheduled_soonest_first():
    later = task("later", "2025-06-03", "09:00")
    sooner = task("sooner", "2025-06-01", "12:01")
    groups = group_tasks([later, sooner], NOW)
    assert [t.id for t in groups.scheduled] == ["sooner", "later"]
    assert groups.active == []


def test_due_exactly_now_is_active():
    groups = group_tasks([task("now", "2025-06-01", "12:00")], NOW)
    assert groups.scheduled == []
    assert [t.id for t in groups.active] == ["now"]


def test_active_sorted_latest_due_first_dateless_last():
    dateless = task("dateless")
    very_overdue = task("very", "2024-01-01", "08:00")
    overdue = task("recent", "2025-05-31", "08:00")
    bad_date = task("bad", "2025-xx-01", "08:00")
    groups = group_tasks([dateless, very_overdue, bad_date, overdue], NOW)
    assert [t.id for t in groups.active] == ["recent", "very", "dateless", "bad"]


def test_groups_are_disjoint_and_complete():
    tasks = [
        task("p", priority=True),
        task("s", "2030-01-01", "10:00"),
        task("a", "2020-01-01", "10:00"),
        task("n"),
    ]
    groups = group_tasks(tasks, NOW)
    ids = [t.id for t in groups.priority + groups.scheduled + groups.active]
    assert sorted(ids) == ["a", "n", "p", "s"]


def test_views():
    tasks = [
        task("p", priority=True),
        task("s", "2030-01-01", "10:00"),
        task("a", "2020-01-01", "10:00"),
    ]
    assert [t.id for t in scheduled_view(tasks, NOW)] == ["s"]
    assert [t.id for t in dashboard_view(tasks, NOW)] == ["p", "a"]


def test_due_tasks_excludes_priority_future_and_dateless():
    tasks = [
        task("p", priority=True),
        task("future", "2030-01-01", "10:00"),
        task("past", "2020-01-01", "10:00"),
        task("now", "2025-06-01", "12:00"),
        task("dateless"),
    ]
    assert [t.id for t in due_tasks(tasks, NOW)] == ["past", "now"]
