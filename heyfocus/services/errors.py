"""Command errors raised by the task state machine.

Every error leaves the state untouched. The dispatcher reduces them to an
opaque message plus a machine-readable `kind`.
"""

from heyfocus.models.task import TaskStatus


class TaskCommandError(Exception):
    """Base class for rejected commands."""

    kind = "command_error"


class CapacityExceededError(TaskCommandError):
    """Raised when a command would leave more than the allowed active tasks."""

    kind = "capacity_exceeded"

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Cannot have more than {limit} active tasks")


class TaskNotFoundError(TaskCommandError):
    """Raised when no task has the supplied id."""

    kind = "not_found"

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__("Task not found")


class TaskNotActiveError(TaskCommandError):
    """Raised when focus is requested on a missing or non-active task."""

    kind = "not_active"

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__("Task not found or not active")


class NothingToUndoError(TaskCommandError):
    """Raised when undo is requested on an empty journal."""

    kind = "nothing_to_undo"

    def __init__(self):
        super().__init__("Nothing to undo")


class BadRequestError(TaskCommandError):
    """Raised by the dispatcher for unknown commands or malformed parameters."""

    kind = "bad_request"


class InvalidStatusError(TaskCommandError):
    """Raised when a status outside active/later is supplied."""

    kind = "invalid_status"

    def __init__(self, status: object):
        self.status = status
        allowed = ", ".join(s.value for s in TaskStatus)
        super().__init__(f"Invalid status: {status!r} (expected one of {allowed})")
