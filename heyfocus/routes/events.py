"""Event routes for HeyFocus.

Provides the Server-Sent Events (SSE) endpoint secondary views listen on.
"""

from flask import Blueprint, Response, current_app, request

events_bp = Blueprint("events", __name__)


@events_bp.route("/events")
def sse_events():
    """Server-Sent Events endpoint for state changes.

    Emits `data_changed` after every successful mutating command, with the
    command name and the post-state. Reconnecting clients resume after their
    Last-Event-ID.
    """
    event_bus = current_app.extensions["event_bus"]
    last_event_id = request.headers.get("Last-Event-ID")

    def generate():
        yield from event_bus.get_sse_stream(last_event_id=last_event_id)

    return Response(
        generate(),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
