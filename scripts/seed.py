#!/usr/bin/env python3
"""Seed script to populate the event log with demo tasks.

Usage:
    EVENT_FILE=/path/to/eventlist.txt python scripts/seed.py

    # Or with default path:
    python scripts/seed.py
"""

import os
import sys
from datetime import date, datetime, timedelta
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tasklog.engine import TaskEngine
from tasklog.models import CreateEvent, generate_id, iso_timestamp


def _create(name: str, **fields) -> CreateEvent:
    return CreateEvent(id=generate_id(), name=name, created_at=iso_timestamp(), **fields)


def demo_events(today: date) -> list[CreateEvent]:
    """A mix of priority, scheduled, overdue and dateless tasks."""
    tomorrow = today + timedelta(days=1)
    next_week = today + timedelta(days=7)
    last_week = today - timedelta(days=7)

    return [
        _create("Renew passport", priority=True, description="Appointment form is on the fridge"),
        _create("Pay rent", priority=True),
        _create("Dentist", date=tomorrow.isoformat(), time="09:30"),
        _create("Team retro", date=next_week.isoformat(), time="15:00", description="Bring the board"),
        _create("Return library books", date=last_week.isoformat(), time="18:00"),
        _create("Call grandma"),
        _create("Water plants", description="Balcony and kitchen"),
    ]


def main():
    event_file = Path(os.environ.get("EVENT_FILE", "eventlist.txt"))

    print(f"Seeding tasks at: {event_file}")
    engine = TaskEngine(event_file)

    existing = len(engine.list_tasks())
    if existing > 0:
        print(f"Warning: Log already has {existing} tasks")
        response = input("Continue and add more? [y/N] ")
        if response.lower() != "y":
            print("Aborted")
            return

    events = engine.event_store.append_batch(demo_events(datetime.now().date()))
    print(f"Appended {len(events)} events")

    groups = engine.groups()
    print(
        f"\nFinal state: {len(groups.priority)} priority, "
        f"{len(groups.scheduled)} scheduled, {len(groups.active)} active"
    )


if __name__ == "__main__":
    main()
