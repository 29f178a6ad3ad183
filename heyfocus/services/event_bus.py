"""EventBus - pushes state changes to the secondary views.

The activity-log and stats views listen on /api/events instead of polling.
The dispatcher emits one `data_changed` event per successful mutation,
carrying the command name and the post-state.

Recent events are kept in a ring so a reconnecting view can resume from
its Last-Event-ID.
"""

import json
import logging
import queue
import threading
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime

logger = logging.getLogger(__name__)

KEEP_ALIVE = ": keep-alive\n\n"


@dataclass
class Event:
    """One broadcast message."""

    event_type: str
    data: dict
    timestamp: datetime = field(default_factory=datetime.now)
    id: str | None = None

    def to_sse(self) -> str:
        """Render as a text/event-stream frame (blank-line terminated)."""
        frame = f"event: {self.event_type}\n" if self.event_type else ""
        frame += f"data: {json.dumps(self.data)}\n"
        if self.id:
            frame += f"id: {self.id}\n"
        return frame + "\n"


class EventBus:
    """Thread-safe broadcaster feeding SSE clients."""

    def __init__(self, buffer_size: int = 50):
        """Initialize the bus.

        Args:
            buffer_size: How many recent events are kept for replay.
        """
        self._lock = threading.Lock()
        self._recent: deque[Event] = deque(maxlen=buffer_size)
        self._clients: list[queue.Queue] = []
        self._last_id = 0

    def emit(self, event_type: str, data: dict) -> Event:
        """Number, buffer and deliver an event.

        Clients whose queue is full are dropped; a slow view never blocks
        the command that caused the event.
        """
        with self._lock:
            self._last_id += 1
            event = Event(event_type=event_type, data=data, id=str(self._last_id))
            self._recent.append(event)

            stalled = []
            for client in self._clients:
                try:
                    client.put_nowait(event)
                except queue.Full:
                    stalled.append(client)
            for client in stalled:
                logger.info("Dropping stalled event stream client")
                self._clients.remove(client)

        return event

    def get_events_since(self, since_id: str | None = None) -> list[Event]:
        """Buffered events after `since_id`, oldest first.

        Without a usable id the whole buffer is returned.
        """
        with self._lock:
            events = list(self._recent)

        if not since_id:
            return events
        try:
            cutoff = int(since_id)
        except ValueError:
            return events
        return [e for e in events if e.id and int(e.id) > cutoff]

    def get_sse_stream(
        self,
        last_event_id: str | None = None,
        timeout: float = 30.0,
    ) -> Iterator[str]:
        """Yield SSE frames until the consumer closes the generator.

        Args:
            last_event_id: Replay buffered events after this id before going live.
            timeout: Idle seconds before a keep-alive comment is sent.
        """
        inbox: queue.Queue = queue.Queue(maxsize=100)
        with self._lock:
            self._clients.append(inbox)

        replayed = 0
        try:
            if last_event_id:
                for missed in self.get_events_since(last_event_id):
                    replayed = int(missed.id)
                    yield missed.to_sse()

            while True:
                try:
                    event = inbox.get(timeout=timeout)
                except queue.Empty:
                    yield KEEP_ALIVE
                    continue
                # Already sent during replay
                if int(event.id) <= replayed:
                    continue
                yield event.to_sse()
        finally:
            with self._lock:
                if inbox in self._clients:
                    self._clients.remove(inbox)

    @property
    def subscriber_count(self) -> int:
        """Connected SSE clients."""
        with self._lock:
            return len(self._clients)


_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Process-wide EventBus."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Drop the process-wide EventBus (tests)."""
    global _event_bus
    _event_bus = None
