"""Journal - append-only log of mutations plus periodic snapshots.

The journal drives undo; snapshots are an audit aid only. Popping the tail
does not roll snapshots back, so a snapshot may describe a prefix that has
since been undone.
"""

from heyfocus.models.app_data import AppData
from heyfocus.models.log_entry import LogEntry, StateSnapshot

SNAPSHOT_INTERVAL = 10
MAX_SNAPSHOTS = 5


class Journal:
    """View over the `logs` and `snapshots` of an AppData."""

    def __init__(self, data: AppData):
        self._data = data

    def __len__(self) -> int:
        return len(self._data.logs)

    def __bool__(self) -> bool:
        return bool(self._data.logs)

    @property
    def entries(self) -> list[LogEntry]:
        return self._data.logs

    @property
    def snapshots(self) -> list[StateSnapshot]:
        return self._data.snapshots

    def append(self, entry: LogEntry) -> None:
        """Append an entry, snapshotting every SNAPSHOT_INTERVAL entries."""
        self._data.logs.append(entry)

        log_index = len(self._data.logs)
        if log_index % SNAPSHOT_INTERVAL == 0:
            # Snapshots at or past this index describe an undone prefix
            self._data.snapshots[:] = [
                s for s in self._data.snapshots if s.log_index < log_index
            ]
            self._data.snapshots.append(
                StateSnapshot(
                    log_index=log_index,
                    tasks=[t.model_copy() for t in self._data.tasks],
                    next_id=self._data.next_id,
                )
            )
            if len(self._data.snapshots) > MAX_SNAPSHOTS:
                del self._data.snapshots[0]

    def pop_tail(self) -> LogEntry:
        """Remove and return the newest entry.

        Raises:
            IndexError: If the journal is empty.
        """
        if not self._data.logs:
            raise IndexError("pop from empty journal")
        return self._data.logs.pop()

    def peek_tail(self) -> LogEntry | None:
        return self._data.logs[-1] if self._data.logs else None

    def clear(self) -> None:
        """Empty the journal and its snapshots."""
        self._data.logs.clear()
        self._data.snapshots.clear()
