"""Core data models for the task log.

Uses Pydantic v2 for validation, ULID for sortable unique IDs.
Events are the only persisted shape; Task is rebuilt from them on every read.
"""

from datetime import datetime, timezone
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from ulid import ULID


def generate_id() -> str:
    """Generate a task ID (``t_`` + lowercase ULID)."""
    return f"t_{str(ULID()).lower()}"


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


def iso_timestamp(dt: datetime | None = None) -> str:
    """Format a timestamp as ISO-8601 UTC with millisecond precision.

    Produces the same shape browsers emit from ``Date.toISOString()``,
    e.g. ``2025-01-15T14:30:00.000Z``.
    """
    if dt is None:
        dt = utc_now()
    dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Task(BaseModel):
    """A task as seen by readers. Derived, never persisted."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    date: str = ""
    time: str = ""
    description: str = ""
    priority: bool = False
    created_at: str = Field(default="", alias="createdAt")

    def to_api(self) -> dict:
        """Serialize with the wire field names."""
        return self.model_dump(by_alias=True)


class CreateEvent(BaseModel):
    """A task was created (or re-created, overwriting prior fields).

    ``id`` and ``createdAt`` have no defaults: the writer stamps them once,
    and a log line without them is malformed rather than re-stamped on
    every replay.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Literal["create"] = "create"
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    date: str = ""
    time: str = ""
    description: str = ""
    priority: bool = False
    created_at: str = Field(min_length=1, alias="createdAt")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v

    def to_task(self) -> Task:
        """Build the task this event describes.

        Priority tasks never carry a date or time, even if a hand-edited
        log line supplies one.
        """
        return Task(
            id=self.id,
            name=self.name,
            date="" if self.priority else self.date,
            time="" if self.priority else self.time,
            description=self.description,
            priority=self.priority,
            created_at=self.created_at,
        )


class DeleteEvent(BaseModel):
    """A task was deleted. Refers to an id that may or may not exist."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Literal["delete"] = "delete"
    id: str = Field(min_length=1)
    deleted_at: str = Field(min_length=1, alias="deletedAt")


TaskEvent = Annotated[Union[CreateEvent, DeleteEvent], Field(discriminator="type")]

_event_adapter = TypeAdapter(TaskEvent)


def encode_event(event: CreateEvent | DeleteEvent) -> str:
    """Serialize an event to a single JSON line (no trailing newline).

    Compact JSON escapes control characters, so the result never contains
    a raw newline.
    """
    return event.model_dump_json(by_alias=True)


def decode_event(line: str) -> CreateEvent | DeleteEvent:
    """Decode one log line.

    Raises:
        pydantic.ValidationError: invalid JSON, unknown ``type`` tag,
            or missing/invalid fields.
    """
    return _event_adapter.validate_json(line)
