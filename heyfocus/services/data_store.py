"""DataStore - persistence adapter for AppData.

Maps AppData onto two logical slots of the key/value store:
- "data": tasks, next_id and snapshots
- "logs_YYYY-MM-DD": the journal of one local day

Only today's log slot is surfaced on load; earlier days stay in the store
until swept.
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Any

from pydantic import ValidationError

from heyfocus.models.app_data import AppData
from heyfocus.models.log_entry import LogEntry, StateSnapshot
from heyfocus.models.task import Task
from heyfocus.services.clock import DATE_FORMAT, Clock
from heyfocus.services.kv_store import JsonFileStore

logger = logging.getLogger(__name__)

DATA_KEY = "data"
LOGS_KEY_PREFIX = "logs_"
_LOGS_KEY_RE = re.compile(r"^logs_(\d{4}-\d{2}-\d{2})$")


def logs_key(day: str) -> str:
    """Store key holding the journal for `day` (YYYY-MM-DD)."""
    return f"{LOGS_KEY_PREFIX}{day}"


class DataStore:
    """Reads and writes AppData through a JsonFileStore.

    Write failures are logged and swallowed: the in-memory state stays
    authoritative and the next successful save re-emits it.
    """

    def __init__(self, kv: JsonFileStore, clock: Clock | None = None):
        """Initialize the adapter.

        Args:
            kv: Backing key/value store.
            clock: Clock used to pick the day's log slot.
        """
        self.kv = kv
        self.clock = clock or Clock()
        self.log_day = self.clock.today()

    # =========================================================================
    # Load
    # =========================================================================

    def load(self) -> AppData:
        """Load tasks, snapshots and today's journal.

        Malformed slots are replaced by empty values. `next_id` is raised
        above every stored task id if the stored counter lags behind.
        """
        self.log_day = self.clock.today()
        raw = self.kv.get(DATA_KEY)
        if not isinstance(raw, dict):
            raw = {}

        tasks = self._parse_list(raw.get("tasks"), Task, "tasks")
        snapshots = self._parse_list(raw.get("snapshots"), StateSnapshot, "snapshots")
        raw_logs = self.kv.get(logs_key(self.log_day))
        logs = self._parse_list(raw_logs, LogEntry, "logs")

        # Snapshots index into the journal they were taken with; a day
        # without a stored journal starts without them.
        if raw_logs is None and snapshots:
            logger.info(f"Dropping {len(snapshots)} snapshots from an earlier day")
            snapshots = []

        next_id = raw.get("next_id", 0)
        if not isinstance(next_id, int) or next_id < 0:
            logger.warning(f"Invalid stored next_id {next_id!r}, recomputing")
            next_id = 0
        floor = max((t.id for t in tasks), default=-1) + 1
        if next_id < floor:
            logger.info(f"Raising next_id from {next_id} to {floor}")
            next_id = floor

        data = AppData(tasks=tasks, logs=logs, next_id=next_id, snapshots=snapshots)
        logger.info(
            f"Loaded data: {len(data.tasks)} tasks, {len(data.logs)} log entries "
            f"for {self.log_day}"
        )
        return data

    @staticmethod
    def _parse_list(raw: Any, model: type, label: str) -> list:
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning(f"Stored {label} is not a list, ignoring")
            return []
        try:
            return [model.model_validate(item) for item in raw]
        except ValidationError as e:
            logger.warning(f"Stored {label} failed validation: {e}, ignoring")
            return []

    # =========================================================================
    # Save
    # =========================================================================

    def save(self, data: AppData) -> bool:
        """Persist AppData. Returns True if the write reached disk."""
        wire = data.to_wire()
        self.kv.set(
            DATA_KEY,
            {
                "tasks": wire["tasks"],
                "next_id": wire["next_id"],
                "snapshots": wire["snapshots"],
            },
        )
        self.kv.set(logs_key(self.log_day), wire["logs"])

        try:
            self.kv.save()
            logger.debug(f"Saved data: {len(data.tasks)} tasks, {len(data.logs)} log entries")
            return True
        except OSError as e:
            logger.error(f"Failed to save data to {self.kv.path}: {e}")
            return False

    # =========================================================================
    # Day handling
    # =========================================================================

    def day_changed(self) -> bool:
        """Whether the local date moved past the day the journal belongs to."""
        return self.clock.today() != self.log_day

    def start_new_day(self) -> str:
        """Point the log slot at today's key. Returns the new day."""
        previous = self.log_day
        self.log_day = self.clock.today()
        logger.info(f"Log day rolled over from {previous} to {self.log_day}")
        return self.log_day

    def log_days(self) -> list[str]:
        """All days with a stored log slot, oldest first."""
        days = []
        for key in self.kv.keys():
            match = _LOGS_KEY_RE.match(key)
            if match:
                days.append(match.group(1))
        return sorted(days)

    def sweep_logs(self, retain_days: int) -> int:
        """Delete log slots older than `retain_days` days (today counts as one).

        Returns:
            Number of log slots removed.
        """
        if retain_days < 1:
            raise ValueError("retain_days must be at least 1")

        today = datetime.strptime(self.clock.today(), DATE_FORMAT)
        cutoff = (today - timedelta(days=retain_days - 1)).strftime(DATE_FORMAT)

        removed = 0
        for day in self.log_days():
            if day < cutoff:
                self.kv.delete(logs_key(day))
                removed += 1

        if removed:
            try:
                self.kv.save()
            except OSError as e:
                logger.error(f"Failed to save after sweeping logs: {e}")
            logger.info(f"Swept {removed} log slots older than {cutoff}")
        return removed
