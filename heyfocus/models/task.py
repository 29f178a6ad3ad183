"""Task model for the active/later buckets."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TaskStatus(str, Enum):
    """Which bucket a task lives in.

    - ACTIVE: surfaced for work, capped at five, may hold focus
    - LATER: parked, never focused
    """

    ACTIVE = "active"
    LATER = "later"


class Task(BaseModel):
    """A single unit of work curated by the user.

    On the wire `is_focus` is spelled `isFocus`; both spellings are accepted
    when loading.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(..., ge=0, description="Unique task id, never reused")
    text: str = Field(..., description="Free-form task text")
    status: TaskStatus = Field(
        default=TaskStatus.ACTIVE,
        description="Bucket the task lives in",
    )
    is_focus: bool = Field(
        default=False,
        alias="isFocus",
        description="Whether this is the current focus task",
    )

    @property
    def is_active(self) -> bool:
        return self.status == TaskStatus.ACTIVE
