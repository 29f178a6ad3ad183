"""Stats routes for HeyFocus.

Provides the activity statistics computed from today's journal.
"""

from flask import Blueprint, current_app, jsonify

stats_bp = Blueprint("stats", __name__)


@stats_bp.route("/stats", methods=["GET"])
def get_stats():
    """Get today's focus statistics.

    Returns:
        JSON object with:
        - daily: cleared, switches, focus minutes and score
        - sessions / task_focus_times: focus sessions and per-task totals
        - hourly_activity / switch_frequency: 24 hourly buckets each
        - slot_utilization: active-slot usage over the day
    """
    state_machine = current_app.extensions["state_machine"]
    stats_service = current_app.extensions["stats_service"]
    return jsonify(stats_service.build_report(state_machine.load_data()))
