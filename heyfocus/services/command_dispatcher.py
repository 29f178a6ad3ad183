"""Command dispatcher - the bridge between front-ends and the state machine.

Front-ends invoke commands by name with a flat parameter dict (the HTTP
routes and any embedding shell use the same path). The dispatcher validates
parameters, runs the command, reduces errors to opaque strings and
broadcasts the post-state to listeners.

Commands are serialized by the state machine's lock, so each one observes
every earlier one in dispatch order.
"""

import logging
from dataclasses import dataclass
from typing import Any

from heyfocus.models.app_data import AppData
from heyfocus.services.errors import BadRequestError, TaskCommandError
from heyfocus.services.event_bus import EventBus
from heyfocus.services.task_state_machine import TaskStateMachine

logger = logging.getLogger(__name__)

DATA_CHANGED_EVENT = "data_changed"

# Command name -> accepted parameters (first name is canonical, rest are aliases)
COMMANDS: dict[str, dict[str, tuple[str, ...]]] = {
    "load_data": {},
    "add_task": {"text": ("text",), "status": ("status",)},
    "move_task": {"id": ("id",), "new_status": ("new_status", "newStatus", "status")},
    "set_focus": {"id": ("id",)},
    "clear_focus": {},
    "complete_task": {"id": ("id",)},
    "delete_task": {"id": ("id",)},
    "edit_task": {"id": ("id",), "text": ("text",)},
    "undo_action": {},
    "clear_logs": {},
}

READ_ONLY_COMMANDS = frozenset({"load_data"})


def _parse_task_id(value: Any) -> int:
    """Accept a non-negative int or a string of digits; floats and bools are rejected."""
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    raise BadRequestError(f"Invalid task id: {value!r}")


@dataclass
class CommandResult:
    """Outcome of a dispatched command."""

    command: str
    success: bool
    data: AppData | None = None
    error: str | None = None
    error_kind: str | None = None


class CommandDispatcher:
    """Routes named commands to a TaskStateMachine."""

    def __init__(self, state_machine: TaskStateMachine, event_bus: EventBus | None = None):
        """Initialize the dispatcher.

        Args:
            state_machine: The state machine that owns AppData.
            event_bus: Optional bus receiving `data_changed` after each mutation.
        """
        self.state_machine = state_machine
        self.event_bus = event_bus

    @staticmethod
    def available_commands() -> list[str]:
        return sorted(COMMANDS)

    def dispatch(self, command: str, params: dict[str, Any] | None = None) -> CommandResult:
        """Run a command by name.

        Args:
            command: One of COMMANDS.
            params: Command parameters; aliases such as `newStatus` are accepted.

        Returns:
            CommandResult carrying the post-state or the error message and kind.
        """
        try:
            kwargs = self._bind_params(command, params or {})
        except TaskCommandError as e:
            return self._rejected(command, e)

        # Emitting under the command lock keeps event order equal to commit order
        with self.state_machine.lock:
            try:
                data = getattr(self.state_machine, command)(**kwargs)
            except TaskCommandError as e:
                return self._rejected(command, e)

            if command not in READ_ONLY_COMMANDS and self.event_bus is not None:
                self.event_bus.emit(DATA_CHANGED_EVENT, {"command": command, "data": data.to_wire()})

        return CommandResult(command=command, success=True, data=data)

    @staticmethod
    def _rejected(command: str, error: TaskCommandError) -> CommandResult:
        logger.warning(f"Command {command} rejected: {error}")
        return CommandResult(command=command, success=False, error=str(error), error_kind=error.kind)

    @staticmethod
    def _bind_params(command: str, params: dict[str, Any]) -> dict[str, Any]:
        if command not in COMMANDS:
            raise BadRequestError(f"Unknown command: {command}")

        kwargs: dict[str, Any] = {}
        for name, aliases in COMMANDS[command].items():
            value = next((params[a] for a in aliases if a in params), None)
            if value is None:
                raise BadRequestError(f"Missing parameter: {name}")

            if name == "id":
                kwargs["task_id"] = _parse_task_id(value)
            elif name == "text":
                if not isinstance(value, str):
                    raise BadRequestError("Task text must be a string")
                kwargs["text"] = value
            else:
                kwargs[name] = value
        return kwargs
