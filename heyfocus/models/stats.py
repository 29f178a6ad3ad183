"""Activity statistics models derived from the day's journal."""

from datetime import datetime

from pydantic import BaseModel


class FocusSession(BaseModel):
    """A contiguous stretch of focus on one task."""

    task_id: int
    task_name: str
    start_time: datetime
    end_time: datetime
    duration_minutes: float


class TaskFocusTime(BaseModel):
    """Total focus minutes accumulated by one task."""

    task_id: int
    task_name: str
    total_minutes: float
    color: str


class HourlyActivity(BaseModel):
    hour: int
    count: int = 0
    done_count: int = 0
    focus_count: int = 0


class SwitchData(BaseModel):
    hour: int
    count: int = 0


class SlotSnapshot(BaseModel):
    time: datetime
    active_count: int


class SlotData(BaseModel):
    """Active-slot usage over the day, reconstructed from the journal."""

    current_active: int
    snapshots: list[SlotSnapshot]


class DailyStats(BaseModel):
    """Headline numbers for the day.

    Attributes:
        cleared: Tasks done or deleted.
        switches: Focus switches (lower is better).
        total_focus_minutes: Sum of all focus sessions.
        avg_focus_minutes: Mean focus session length.
        longest_focus_minutes: Longest focus session.
        score: Focus score, 0-100.
    """

    cleared: int = 0
    switches: int = 0
    total_focus_minutes: float = 0.0
    avg_focus_minutes: float = 0.0
    longest_focus_minutes: float = 0.0
    score: float = 0.0
