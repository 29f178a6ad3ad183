"""Activity statistics derived from the day's journal.

Feeds the stats view: focus sessions, per-task focus time, hourly activity,
switch frequency, slot utilisation and the daily focus score. Entries with
malformed timestamps are ignored.
"""

import logging
from datetime import datetime

from heyfocus.models.app_data import AppData
from heyfocus.models.log_entry import LogEntry, LogEvent
from heyfocus.models.stats import (
    DailyStats,
    FocusSession,
    HourlyActivity,
    SlotData,
    SlotSnapshot,
    SwitchData,
    TaskFocusTime,
)
from heyfocus.services.clock import Clock, parse_timestamp
from heyfocus.services.task_state_machine import MAX_ACTIVE_TASKS

logger = logging.getLogger(__name__)

CHART_COLORS = [
    "#f97316",  # orange (primary)
    "#3b82f6",  # blue
    "#10b981",  # emerald
    "#8b5cf6",  # violet
    "#ec4899",  # pink
    "#06b6d4",  # cyan
    "#f59e0b",  # amber
    "#6366f1",  # indigo
]

_SESSION_ENDING_EVENTS = {
    LogEvent.CLEAR_FOCUS.value,
    LogEvent.TASK_DONE.value,
    LogEvent.TASK_DELETED.value,
}
_SLOT_GAINING_EVENTS = {LogEvent.TASK_CREATED.value, LogEvent.MOVE_TO_ACTIVE.value}
_SLOT_FREEING_EVENTS = {
    LogEvent.TASK_DONE.value,
    LogEvent.TASK_DELETED.value,
    LogEvent.MOVE_TO_LATER.value,
}

DEEP_WORK_MINUTES = 45


def _timed(logs: list[LogEntry]) -> list[tuple[datetime, LogEntry]]:
    """Pair entries with parsed times, oldest first, dropping malformed ones."""
    timed = []
    for entry in logs:
        when = parse_timestamp(entry.time)
        if when is None:
            logger.debug(f"Skipping log entry with bad time {entry.time!r}")
            continue
        timed.append((when, entry))
    timed.sort(key=lambda pair: pair[0])
    return timed


def calculate_focus_sessions(logs: list[LogEntry], now: datetime) -> list[FocusSession]:
    """Split the journal into focus sessions.

    A SWITCH_FOCUS carrying a task_id opens a session; the next switch,
    clear, completion or deletion closes it. A session still open at the end
    closes at `now`. Zero-length sessions are dropped.
    """
    sessions: list[FocusSession] = []
    current: tuple[int, str, datetime] | None = None

    def close(end: datetime) -> None:
        task_id, name, start = current
        duration = (end - start).total_seconds() / 60
        if duration > 0:
            sessions.append(
                FocusSession(
                    task_id=task_id,
                    task_name=name,
                    start_time=start,
                    end_time=end,
                    duration_minutes=duration,
                )
            )

    for when, entry in _timed(logs):
        if entry.is_event(LogEvent.SWITCH_FOCUS) and entry.task_id is not None:
            if current:
                close(when)
            current = (entry.task_id, entry.task, when)
        elif entry.event in _SESSION_ENDING_EVENTS and current:
            close(when)
            current = None

    if current:
        close(now)

    return sessions


def calculate_task_focus_times(sessions: list[FocusSession]) -> list[TaskFocusTime]:
    """Total focus minutes per task, largest first, each with a chart colour."""
    totals: dict[int, list] = {}
    for session in sessions:
        if session.task_id in totals:
            totals[session.task_id][1] += session.duration_minutes
        else:
            totals[session.task_id] = [session.task_name, session.duration_minutes]

    results = [
        TaskFocusTime(
            task_id=task_id,
            task_name=name,
            total_minutes=total,
            color=CHART_COLORS[index % len(CHART_COLORS)],
        )
        for index, (task_id, (name, total)) in enumerate(totals.items())
    ]
    return sorted(results, key=lambda r: r.total_minutes, reverse=True)


def calculate_hourly_activity(logs: list[LogEntry]) -> list[HourlyActivity]:
    hours = [HourlyActivity(hour=h) for h in range(24)]
    for when, entry in _timed(logs):
        bucket = hours[when.hour]
        bucket.count += 1
        if entry.is_event(LogEvent.TASK_DONE):
            bucket.done_count += 1
        if entry.is_event(LogEvent.SWITCH_FOCUS):
            bucket.focus_count += 1
    return hours


def calculate_switch_frequency(logs: list[LogEntry]) -> list[SwitchData]:
    counts = [SwitchData(hour=h) for h in range(24)]
    for when, entry in _timed(logs):
        if entry.is_event(LogEvent.SWITCH_FOCUS):
            counts[when.hour].count += 1
    return counts


def calculate_slot_utilization(
    logs: list[LogEntry], current_active: int, now: datetime
) -> SlotData:
    """Reconstruct the active-slot count over the day.

    Walks the journal backwards from the current count, undoing the effect
    of each entry, then returns the samples in chronological order.
    """
    snapshots = [SlotSnapshot(time=now, active_count=current_active)]
    active = current_active

    for when, entry in reversed(_timed(logs)):
        if entry.event in _SLOT_GAINING_EVENTS:
            active = max(0, active - 1)
        elif entry.event in _SLOT_FREEING_EVENTS:
            active = min(MAX_ACTIVE_TASKS, active + 1)
        snapshots.append(SlotSnapshot(time=when, active_count=active))

    snapshots.reverse()
    return SlotData(current_active=current_active, snapshots=snapshots)


def calculate_daily_stats(logs: list[LogEntry], sessions: list[FocusSession]) -> DailyStats:
    """Headline numbers and the 0-100 focus score.

    Score:
    - total focus time: up to 50 points (4h = 50)
    - average session length: up to 30 points (30 min = 30)
    - switch penalty: -2 per switch beyond 5
    - deep work bonus: +10 per session of 45+ minutes, up to 20
    """
    cleared = sum(
        1 for e in logs if e.is_event(LogEvent.TASK_DONE) or e.is_event(LogEvent.TASK_DELETED)
    )
    switches = sum(1 for e in logs if e.is_event(LogEvent.SWITCH_FOCUS))

    durations = [s.duration_minutes for s in sessions]
    total = sum(durations)
    avg = total / len(durations) if durations else 0.0
    longest = max(durations, default=0.0)

    focus_time_score = min(50.0, (total / 240) * 50)
    avg_session_score = min(30.0, (avg / 30) * 30)
    switch_penalty = max(0, (switches - 5) * 2)
    deep_work = sum(1 for d in durations if d >= DEEP_WORK_MINUTES)
    deep_work_bonus = min(20, deep_work * 10)

    score = focus_time_score + avg_session_score - switch_penalty + deep_work_bonus
    return DailyStats(
        cleared=cleared,
        switches=switches,
        total_focus_minutes=total,
        avg_focus_minutes=avg,
        longest_focus_minutes=longest,
        score=max(0.0, min(100.0, score)),
    )


def format_duration(minutes: float) -> str:
    if minutes < 1:
        return "<1m"
    if minutes < 60:
        return f"{round(minutes)}m"
    hours = int(minutes // 60)
    mins = round(minutes % 60)
    return f"{hours}h {mins}m" if mins > 0 else f"{hours}h"


class StatsService:
    """Computes the stats view for a given state."""

    def __init__(self, clock: Clock | None = None):
        self.clock = clock or Clock()

    def build_report(self, data: AppData) -> dict:
        """Every statistic for `data`, JSON-ready."""
        now = self.clock.now()
        sessions = calculate_focus_sessions(data.logs, now)
        daily = calculate_daily_stats(data.logs, sessions)

        return {
            "daily": daily.model_dump(mode="json"),
            "total_focus": format_duration(daily.total_focus_minutes),
            "sessions": [s.model_dump(mode="json") for s in sessions],
            "task_focus_times": [
                t.model_dump(mode="json") for t in calculate_task_focus_times(sessions)
            ],
            "hourly_activity": [
                h.model_dump(mode="json") for h in calculate_hourly_activity(data.logs)
            ],
            "switch_frequency": [
                s.model_dump(mode="json") for s in calculate_switch_frequency(data.logs)
            ],
            "slot_utilization": calculate_slot_utilization(
                data.logs, data.active_count(), now
            ).model_dump(mode="json"),
        }
