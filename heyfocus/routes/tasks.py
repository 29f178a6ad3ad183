"""Task routes for HeyFocus.

REST front for the command dispatcher:
- Load state
- Add, edit, move, complete and delete tasks
- Set and clear focus
- Undo and clear the activity log
- Invoke any command by name
"""

from flask import Blueprint, current_app, jsonify, request

from heyfocus.services.command_dispatcher import CommandDispatcher, CommandResult

tasks_bp = Blueprint("tasks", __name__)

ERROR_STATUS = {
    "not_found": 404,
    "capacity_exceeded": 409,
    "not_active": 409,
    "nothing_to_undo": 409,
    "invalid_status": 400,
    "bad_request": 400,
}


def _get_dispatcher() -> CommandDispatcher:
    """Get the command dispatcher from app extensions."""
    return current_app.extensions["dispatcher"]


def _run(command: str, params: dict | None = None):
    """Dispatch a command and turn its result into a JSON response."""
    result: CommandResult = _get_dispatcher().dispatch(command, params)
    if result.success:
        return jsonify(result.data.to_wire())
    status = ERROR_STATUS.get(result.error_kind, 400)
    return jsonify({"error": result.error, "kind": result.error_kind}), status


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@tasks_bp.route("/data", methods=["GET"])
def load_data():
    """Get the full state: tasks, today's log, next_id and snapshots."""
    return _run("load_data")


@tasks_bp.route("/tasks", methods=["POST"])
def add_task():
    """Add a task.

    Request body:
        {
            "text": "Write report",
            "status": "active" | "later"
        }
    """
    body = _body()
    return _run("add_task", {"text": body.get("text"), "status": body.get("status", "active")})


@tasks_bp.route("/tasks/<int:task_id>", methods=["PATCH"])
def edit_task(task_id: int):
    """Replace a task's text. Body: {"text": "..."}."""
    return _run("edit_task", {"id": task_id, "text": _body().get("text")})


@tasks_bp.route("/tasks/<int:task_id>", methods=["DELETE"])
def delete_task(task_id: int):
    return _run("delete_task", {"id": task_id})


@tasks_bp.route("/tasks/<int:task_id>/move", methods=["POST"])
def move_task(task_id: int):
    """Move a task between buckets. Body: {"status": "active" | "later"}."""
    body = _body()
    return _run("move_task", {**body, "id": task_id})


@tasks_bp.route("/tasks/<int:task_id>/focus", methods=["POST"])
def set_focus(task_id: int):
    return _run("set_focus", {"id": task_id})


@tasks_bp.route("/tasks/<int:task_id>/complete", methods=["POST"])
def complete_task(task_id: int):
    return _run("complete_task", {"id": task_id})


@tasks_bp.route("/focus", methods=["DELETE"])
def clear_focus():
    return _run("clear_focus")


@tasks_bp.route("/undo", methods=["POST"])
def undo_action():
    """Undo the most recent journaled action."""
    return _run("undo_action")


@tasks_bp.route("/logs", methods=["DELETE"])
def clear_logs():
    """Clear today's activity log and snapshots."""
    return _run("clear_logs")


@tasks_bp.route("/commands/<name>", methods=["POST"])
def invoke_command(name: str):
    """Invoke a command by name with parameters in the JSON body.

    Mirrors the desktop shell's invoke bridge, e.g.
    POST /api/commands/move_task {"id": 3, "newStatus": "later"}
    """
    return _run(name, _body())
