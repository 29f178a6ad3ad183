"""Clock service - local timestamps for the journal."""

from datetime import datetime, timedelta

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"


def parse_timestamp(value: str) -> datetime | None:
    """Parse a journal timestamp, returning None when malformed."""
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT)
    except (TypeError, ValueError):
        return None


class Clock:
    """Local wall clock.

    Subclasses override `now()` to control time (tests use a frozen clock).
    """

    def now(self) -> datetime:
        return datetime.now().replace(microsecond=0)

    def timestamp(self) -> str:
        """Current local time as YYYY-MM-DDTHH:MM:SS."""
        return self.now().strftime(TIMESTAMP_FORMAT)

    def today(self) -> str:
        """Current local date as YYYY-MM-DD."""
        return self.now().strftime(DATE_FORMAT)

    def is_within(self, timestamp: str, seconds: float) -> bool:
        """Check whether `timestamp` lies within `seconds` of now.

        Malformed timestamps are never within the window.
        """
        then = parse_timestamp(timestamp)
        if then is None:
            return False
        return abs(self.now() - then) <= timedelta(seconds=seconds)
