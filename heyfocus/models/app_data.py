"""AppData - the whole serializable state of the tracker."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from heyfocus.models.log_entry import LogEntry, StateSnapshot
from heyfocus.models.task import Task, TaskStatus


class AppData(BaseModel):
    """Tasks, today's journal, the id counter and audit snapshots."""

    model_config = ConfigDict(populate_by_name=True)

    tasks: list[Task] = Field(default_factory=list)
    logs: list[LogEntry] = Field(default_factory=list)
    next_id: int = Field(default=0, ge=0)
    snapshots: list[StateSnapshot] = Field(default_factory=list)

    def find_task(self, task_id: int) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def focused_task(self) -> Task | None:
        for task in self.tasks:
            if task.is_focus:
                return task
        return None

    def active_count(self) -> int:
        return sum(1 for t in self.tasks if t.status == TaskStatus.ACTIVE)

    def clone(self) -> "AppData":
        """Deep copy so callers never hold references into shared state."""
        return self.model_copy(deep=True)

    def to_wire(self) -> dict[str, Any]:
        """Serialize with wire field names (`isFocus`) and absent optionals omitted."""
        return {
            "tasks": [t.model_dump(mode="json", by_alias=True) for t in self.tasks],
            "logs": [e.model_dump(mode="json", exclude_none=True) for e in self.logs],
            "next_id": self.next_id,
            "snapshots": [
                s.model_dump(mode="json", by_alias=True) for s in self.snapshots
            ],
        }
