"""Domain models for HeyFocus."""

from heyfocus.models.app_data import AppData
from heyfocus.models.config import DEBUG_STORE_FILE, RELEASE_STORE_FILE, AppConfig
from heyfocus.models.log_entry import LogEntry, LogEvent, StateSnapshot
from heyfocus.models.stats import (
    DailyStats,
    FocusSession,
    HourlyActivity,
    SlotData,
    SlotSnapshot,
    SwitchData,
    TaskFocusTime,
)
from heyfocus.models.task import Task, TaskStatus

__all__ = [
    # Tasks
    "Task",
    "TaskStatus",
    # Journal
    "LogEntry",
    "LogEvent",
    "StateSnapshot",
    # State
    "AppData",
    # Config
    "AppConfig",
    "DEBUG_STORE_FILE",
    "RELEASE_STORE_FILE",
    # Stats
    "DailyStats",
    "FocusSession",
    "HourlyActivity",
    "SlotData",
    "SlotSnapshot",
    "SwitchData",
    "TaskFocusTime",
]
