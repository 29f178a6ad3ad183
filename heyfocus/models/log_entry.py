"""Journal models for HeyFocus.

A LogEntry records one mutation together with exactly the fields needed to
invert it. A StateSnapshot is a periodic copy of the task set kept for audit.
"""

from enum import Enum

from pydantic import BaseModel, Field

from heyfocus.models.task import Task


class LogEvent(str, Enum):
    """Journal event types."""

    TASK_CREATED = "TASK_CREATED"
    TASK_EDITED = "TASK_EDITED"
    TASK_DELETED = "TASK_DELETED"
    TASK_DONE = "TASK_DONE"
    MOVE_TO_ACTIVE = "MOVE_TO_ACTIVE"
    MOVE_TO_LATER = "MOVE_TO_LATER"
    SWITCH_FOCUS = "SWITCH_FOCUS"
    CLEAR_FOCUS = "CLEAR_FOCUS"


class LogEntry(BaseModel):
    """A single journal entry.

    `event` is kept as a plain string so journals written by newer versions
    still load; undo treats unknown events as no-ops.

    Attributes:
        time: Local timestamp, YYYY-MM-DDTHH:MM:SS.
        event: One of LogEvent (or an unknown future value).
        task: Post-event text of the affected task, for display.
        task_id: Id of the affected task.
        prev_status: Status before the event (moves, removals).
        prev_text: Text before the event (edits, removals).
        prev_focus: Focus flag before the event (moves, removals, clear).
        prev_focus_id: Task that held focus before a SWITCH_FOCUS.
    """

    time: str
    event: str
    task: str = ""
    task_id: int | None = None
    prev_status: str | None = None
    prev_text: str | None = None
    prev_focus: bool | None = None
    prev_focus_id: int | None = None

    def is_event(self, event: LogEvent) -> bool:
        return self.event == event.value


class StateSnapshot(BaseModel):
    """Copy of the task set at the moment the journal reached `log_index` entries."""

    log_index: int = Field(..., gt=0)
    tasks: list[Task] = Field(default_factory=list)
    next_id: int = 0
