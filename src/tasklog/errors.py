"""Exceptions raised by the task log."""


class TaskLogError(Exception):
    """Base class for task log errors."""


class TaskValidationError(TaskLogError, ValueError):
    """A request was rejected before reaching storage (e.g. empty name)."""


class StorageError(TaskLogError):
    """The event log could not be read or written.

    The underlying ``OSError`` is kept as ``__cause__`` for operators;
    callers should not show it to clients.
    """
