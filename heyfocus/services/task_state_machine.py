"""Task State Machine - the authoritative task set and its undo journal.

Every mutating command runs under one exclusive lock, validates before
touching state, appends the journal entry needed to invert it, persists,
and returns a deep copy of the post-state.

Invariants held after every successful command and after undo:
- task ids are unique and below next_id
- at most MAX_ACTIVE_TASKS tasks are active
- at most one task is focused, and it is active
"""

import logging
import threading
from collections.abc import Callable

from heyfocus.models.app_data import AppData
from heyfocus.models.log_entry import LogEntry, LogEvent
from heyfocus.models.task import Task, TaskStatus
from heyfocus.services.clock import Clock
from heyfocus.services.data_store import DataStore
from heyfocus.services.errors import (
    CapacityExceededError,
    InvalidStatusError,
    NothingToUndoError,
    TaskNotActiveError,
    TaskNotFoundError,
)
from heyfocus.services.journal import MAX_SNAPSHOTS, SNAPSHOT_INTERVAL, Journal

logger = logging.getLogger(__name__)

MAX_ACTIVE_TASKS = 5
FOCUS_MERGE_WINDOW_SECONDS = 30


def invariant_violations(data: AppData) -> list[str]:
    """List every invariant the given state breaks (empty when consistent)."""
    problems = []

    ids = [t.id for t in data.tasks]
    if len(ids) != len(set(ids)):
        problems.append("duplicate task ids")
    if ids and data.next_id <= max(ids):
        problems.append(f"next_id {data.next_id} does not exceed max id {max(ids)}")

    if data.active_count() > MAX_ACTIVE_TASKS:
        problems.append(f"{data.active_count()} active tasks (max {MAX_ACTIVE_TASKS})")

    focused = [t for t in data.tasks if t.is_focus]
    if len(focused) > 1:
        problems.append(f"{len(focused)} focused tasks")
    if any(t.status != TaskStatus.ACTIVE for t in focused):
        problems.append("focused task is not active")

    if len(data.snapshots) > MAX_SNAPSHOTS:
        problems.append(f"{len(data.snapshots)} snapshots (max {MAX_SNAPSHOTS})")
    indexes = [s.log_index for s in data.snapshots]
    if any(i % SNAPSHOT_INTERVAL for i in indexes):
        problems.append("snapshot log_index not a multiple of the interval")
    if any(a >= b for a, b in zip(indexes, indexes[1:])):
        problems.append("snapshot log_index not strictly increasing")

    return problems


def _coerce_status(status: TaskStatus | str) -> TaskStatus:
    try:
        return TaskStatus(status)
    except ValueError:
        raise InvalidStatusError(status) from None


class TaskStateMachine:
    """Owns AppData and exposes the command surface.

    ```
    add_task ─► active ◄──move──► later
                  │ set_focus / clear_focus
                  ▼
               focused ──complete/delete──► removed (next active auto-focused)
    ```

    Commands either succeed and return a cloned post-state, or raise a
    TaskCommandError leaving state untouched.
    """

    def __init__(
        self,
        store: DataStore,
        clock: Clock | None = None,
        data: AppData | None = None,
    ):
        """Initialize the state machine.

        Args:
            store: Persistence adapter; state is loaded from it unless `data` is given.
            clock: Clock for journal timestamps and focus windows.
            data: Initial state (used instead of loading from the store).
        """
        self.store = store
        self.clock = clock or store.clock
        self._lock = threading.RLock()
        self._data = data if data is not None else store.load()
        self._journal = Journal(self._data)

        for problem in invariant_violations(self._data):
            logger.warning(f"Loaded state is inconsistent: {problem}")

        self._undo_handlers: dict[str, Callable[[LogEntry], None]] = {
            LogEvent.TASK_CREATED.value: self._undo_created,
            LogEvent.TASK_DELETED.value: self._undo_removed,
            LogEvent.TASK_DONE.value: self._undo_removed,
            LogEvent.MOVE_TO_ACTIVE.value: self._undo_move,
            LogEvent.MOVE_TO_LATER.value: self._undo_move,
            LogEvent.TASK_EDITED.value: self._undo_edit,
            LogEvent.SWITCH_FOCUS.value: self._undo_switch_focus,
            LogEvent.CLEAR_FOCUS.value: self._undo_clear_focus,
        }

    @property
    def lock(self) -> threading.RLock:
        """The command lock; hold it to run follow-up work in commit order."""
        return self._lock

    # =========================================================================
    # Queries
    # =========================================================================

    def load_data(self) -> AppData:
        """Return a deep copy of the current state."""
        with self._lock:
            self._roll_over_day()
            return self._data.clone()

    # =========================================================================
    # Task commands
    # =========================================================================

    def add_task(self, text: str, status: TaskStatus | str = TaskStatus.ACTIVE) -> AppData:
        """Create a task in the given bucket.

        Raises:
            InvalidStatusError: Status is not active/later.
            CapacityExceededError: Adding an active task past the limit.
        """
        with self._lock:
            self._roll_over_day()
            task_status = _coerce_status(status)
            if task_status == TaskStatus.ACTIVE:
                self._require_capacity()

            task = Task(id=self._data.next_id, text=text, status=task_status)
            self._data.next_id += 1
            self._data.tasks.append(task)
            self._log(LogEvent.TASK_CREATED, task.text, task_id=task.id)

            logger.info(f"Task added id={task.id} status={task.status.value}")
            return self._commit()

    def move_task(self, task_id: int, new_status: TaskStatus | str) -> AppData:
        """Move a task between the active and later buckets.

        Moving to later also drops focus.

        Raises:
            InvalidStatusError: Status is not active/later.
            TaskNotFoundError: Unknown id.
            CapacityExceededError: Moving a later task into full active slots.
        """
        with self._lock:
            self._roll_over_day()
            target = _coerce_status(new_status)
            task = self._require_task(task_id)
            if target == TaskStatus.ACTIVE and task.status == TaskStatus.LATER:
                self._require_capacity()

            prev_status = task.status
            prev_focus = task.is_focus
            task.status = target
            if target == TaskStatus.LATER:
                task.is_focus = False

            event = (
                LogEvent.MOVE_TO_ACTIVE if target == TaskStatus.ACTIVE else LogEvent.MOVE_TO_LATER
            )
            self._log(
                event,
                task.text,
                task_id=task.id,
                prev_status=prev_status.value,
                prev_focus=prev_focus,
            )

            logger.info(f"Task moved id={task.id} {prev_status.value} -> {target.value}")
            return self._commit()

    def edit_task(self, task_id: int, text: str) -> AppData:
        """Replace a task's text.

        Raises:
            TaskNotFoundError: Unknown id.
        """
        with self._lock:
            self._roll_over_day()
            task = self._require_task(task_id)
            prev_text = task.text
            task.text = text
            self._log(LogEvent.TASK_EDITED, text, task_id=task.id, prev_text=prev_text)

            logger.info(f"Task edited id={task.id}")
            return self._commit()

    def complete_task(self, task_id: int) -> AppData:
        """Mark a task done and remove it. See `_remove_task`."""
        with self._lock:
            self._roll_over_day()
            self._remove_task(task_id, LogEvent.TASK_DONE)
            logger.info(f"Task completed id={task_id}")
            return self._commit()

    def delete_task(self, task_id: int) -> AppData:
        """Delete a task. See `_remove_task`."""
        with self._lock:
            self._roll_over_day()
            self._remove_task(task_id, LogEvent.TASK_DELETED)
            logger.info(f"Task deleted id={task_id}")
            return self._commit()

    def _remove_task(self, task_id: int, event: LogEvent) -> None:
        """Journal and remove a task, then cascade focus if it held it.

        The cascade is journaled as its own SWITCH_FOCUS entry so removal and
        auto-focus are undone one step at a time.

        Raises:
            TaskNotFoundError: Unknown id.
        """
        task = self._require_task(task_id)
        was_focused = task.is_focus

        self._log(
            event,
            task.text,
            task_id=task.id,
            prev_status=task.status.value,
            prev_text=task.text,
            prev_focus=was_focused,
        )
        self._data.tasks = [t for t in self._data.tasks if t.id != task_id]

        if was_focused:
            successor = next((t for t in self._data.tasks if t.is_active), None)
            if successor is not None:
                self._focus_only(successor.id)
                self._log(LogEvent.SWITCH_FOCUS, successor.text, task_id=successor.id)
                logger.info(f"Focus passed to id={successor.id}")

    # =========================================================================
    # Focus commands
    # =========================================================================

    def set_focus(self, task_id: int) -> AppData:
        """Focus an active task, unfocusing every other task.

        A SWITCH_FOCUS tail entry younger than FOCUS_MERGE_WINDOW_SECONDS is
        rewritten in place instead of appending, keeping its original
        prev_focus_id so undo returns to the focus held before the burst.

        Raises:
            TaskNotActiveError: Unknown id or task is not active.
        """
        with self._lock:
            self._roll_over_day()
            task = self._data.find_task(task_id)
            if task is None or not task.is_active:
                raise TaskNotActiveError(task_id)

            current = self._data.focused_task()
            prev_focus_id = current.id if current else None
            self._focus_only(task.id)

            tail = self._journal.peek_tail()
            if self._is_recent_switch(tail):
                tail.task = task.text
                tail.task_id = task.id
                tail.time = self.clock.timestamp()
                logger.info(f"Focus set id={task.id} (merged into previous switch)")
            else:
                self._log(
                    LogEvent.SWITCH_FOCUS,
                    task.text,
                    task_id=task.id,
                    prev_focus_id=prev_focus_id,
                )
                logger.info(f"Focus set id={task.id} prev={prev_focus_id}")

            return self._commit()

    def clear_focus(self) -> AppData:
        """Drop focus from every task.

        With nothing focused this is a no-op and writes nothing. A
        SWITCH_FOCUS tail entry younger than FOCUS_MERGE_WINDOW_SECONDS is
        erased instead of logging CLEAR_FOCUS.
        """
        with self._lock:
            self._roll_over_day()
            focused = self._data.focused_task()
            if focused is None:
                return self._data.clone()

            for task in self._data.tasks:
                task.is_focus = False

            if self._is_recent_switch(self._journal.peek_tail()):
                self._journal.pop_tail()
                logger.info(f"Focus cleared id={focused.id} (short focus erased)")
            else:
                self._log(LogEvent.CLEAR_FOCUS, focused.text, task_id=focused.id, prev_focus=True)
                logger.info(f"Focus cleared id={focused.id}")

            return self._commit()

    def _is_recent_switch(self, entry: LogEntry | None) -> bool:
        return (
            entry is not None
            and entry.is_event(LogEvent.SWITCH_FOCUS)
            and self.clock.is_within(entry.time, FOCUS_MERGE_WINDOW_SECONDS)
        )

    def _focus_only(self, task_id: int | None) -> None:
        """Focus exactly `task_id` (or nothing when None)."""
        for task in self._data.tasks:
            task.is_focus = task.id == task_id

    # =========================================================================
    # Journal commands
    # =========================================================================

    def undo_action(self) -> AppData:
        """Invert the newest journal entry and drop it.

        No inverse entry is journaled. Unknown events are dropped without
        touching tasks.

        Raises:
            NothingToUndoError: The journal is empty.
        """
        with self._lock:
            self._roll_over_day()
            if not self._journal:
                raise NothingToUndoError()

            entry = self._journal.pop_tail()
            handler = self._undo_handlers.get(entry.event)
            if handler is None:
                logger.info(f"Undo dropped unknown event {entry.event!r}")
            else:
                handler(entry)
                logger.info(f"Undid {entry.event} task_id={entry.task_id}")

            return self._commit()

    def clear_logs(self) -> AppData:
        """Empty the journal and snapshots. Tasks are untouched."""
        with self._lock:
            self._roll_over_day()
            count = len(self._journal)
            self._journal.clear()
            logger.info(f"Cleared {count} log entries")
            return self._commit()

    # ---- inverses ----

    def _undo_created(self, entry: LogEntry) -> None:
        if entry.task_id is not None:
            self._data.tasks = [t for t in self._data.tasks if t.id != entry.task_id]

    def _undo_removed(self, entry: LogEntry) -> None:
        if entry.task_id is None or entry.prev_status is None or entry.prev_text is None:
            return
        if self._data.find_task(entry.task_id) is not None:
            logger.warning(f"Undo skipped: task id={entry.task_id} already exists")
            return
        try:
            status = TaskStatus(entry.prev_status)
        except ValueError:
            logger.warning(f"Undo skipped: unknown status {entry.prev_status!r}")
            return

        was_focused = bool(entry.prev_focus)
        self._data.tasks.append(
            Task(id=entry.task_id, text=entry.prev_text, status=status, is_focus=was_focused)
        )
        if was_focused:
            self._focus_only(entry.task_id)

    def _undo_move(self, entry: LogEntry) -> None:
        if entry.task_id is None or entry.prev_status is None:
            return
        task = self._data.find_task(entry.task_id)
        if task is None:
            return
        try:
            task.status = TaskStatus(entry.prev_status)
        except ValueError:
            logger.warning(f"Undo skipped: unknown status {entry.prev_status!r}")
            return

        if entry.prev_focus is not None:
            if entry.prev_focus:
                self._focus_only(task.id)
            else:
                task.is_focus = False

    def _undo_edit(self, entry: LogEntry) -> None:
        if entry.task_id is None or entry.prev_text is None:
            return
        task = self._data.find_task(entry.task_id)
        if task is not None:
            task.text = entry.prev_text

    def _undo_switch_focus(self, entry: LogEntry) -> None:
        self._focus_only(entry.prev_focus_id)

    def _undo_clear_focus(self, entry: LogEntry) -> None:
        if entry.task_id is not None:
            self._focus_only(entry.task_id)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require_task(self, task_id: int) -> Task:
        task = self._data.find_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def _require_capacity(self) -> None:
        if self._data.active_count() >= MAX_ACTIVE_TASKS:
            raise CapacityExceededError(MAX_ACTIVE_TASKS)

    def _log(self, event: LogEvent, text: str, **fields) -> None:
        self._journal.append(
            LogEntry(time=self.clock.timestamp(), event=event.value, task=text, **fields)
        )

    def _roll_over_day(self) -> None:
        """Start a fresh journal when the local date has moved on.

        The previous day's entries stay in the store under their own key.
        """
        if self.store.day_changed():
            self._journal.clear()
            self.store.start_new_day()

    def _commit(self) -> AppData:
        self.store.save(self._data)
        return self._data.clone()
