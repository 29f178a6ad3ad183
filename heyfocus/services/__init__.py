"""Services for HeyFocus."""

from heyfocus.services.clock import Clock, parse_timestamp
from heyfocus.services.command_dispatcher import (
    COMMANDS,
    CommandDispatcher,
    CommandResult,
)
from heyfocus.services.config_service import (
    ConfigService,
    get_config_service,
    reset_config_service,
)
from heyfocus.services.data_store import DataStore, logs_key
from heyfocus.services.errors import (
    BadRequestError,
    CapacityExceededError,
    InvalidStatusError,
    NothingToUndoError,
    TaskCommandError,
    TaskNotActiveError,
    TaskNotFoundError,
)
from heyfocus.services.event_bus import Event, EventBus, get_event_bus, reset_event_bus
from heyfocus.services.journal import MAX_SNAPSHOTS, SNAPSHOT_INTERVAL, Journal
from heyfocus.services.kv_store import JsonFileStore
from heyfocus.services.stats_service import StatsService
from heyfocus.services.task_state_machine import (
    FOCUS_MERGE_WINDOW_SECONDS,
    MAX_ACTIVE_TASKS,
    TaskStateMachine,
    invariant_violations,
)

__all__ = [
    "Clock",
    "parse_timestamp",
    # Persistence
    "DataStore",
    "JsonFileStore",
    "logs_key",
    # Journal
    "Journal",
    "MAX_SNAPSHOTS",
    "SNAPSHOT_INTERVAL",
    # State machine
    "TaskStateMachine",
    "invariant_violations",
    "FOCUS_MERGE_WINDOW_SECONDS",
    "MAX_ACTIVE_TASKS",
    # Errors
    "TaskCommandError",
    "BadRequestError",
    "CapacityExceededError",
    "InvalidStatusError",
    "NothingToUndoError",
    "TaskNotActiveError",
    "TaskNotFoundError",
    # Dispatch
    "COMMANDS",
    "CommandDispatcher",
    "CommandResult",
    # Events
    "Event",
    "EventBus",
    "get_event_bus",
    "reset_event_bus",
    # Config
    "ConfigService",
    "get_config_service",
    "reset_config_service",
    # Stats
    "StatsService",
]
