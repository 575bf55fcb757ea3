"""Data models for puzzle input acquisition."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

FIRST_EVENT_YEAR = 2015
LAST_PUZZLE_DAY = 25


@dataclass(frozen=True, order=True)
class PuzzleKey:
    """Identifies one puzzle's input: a (year, day) pair."""

    year: int
    day: int

    def __post_init__(self) -> None:
        if isinstance(self.year, bool) or not isinstance(self.year, int):
            raise ValueError(f"year must be an integer, got {self.year!r}")
        if isinstance(self.day, bool) or not isinstance(self.day, int):
            raise ValueError(f"day must be an integer, got {self.day!r}")
        if self.year < FIRST_EVENT_YEAR:
            raise ValueError(f"year must be {FIRST_EVENT_YEAR} or later, got {self.year}")
        if not 1 <= self.day <= LAST_PUZZLE_DAY:
            raise ValueError(f"day must be between 1 and {LAST_PUZZLE_DAY}, got {self.day}")

    @property
    def input_path(self) -> str:
        """URL path of the input endpoint for this puzzle."""
        return f"/{self.year}/day/{self.day}/input"

    def __str__(self) -> str:
        return f"{self.year} day {self.day:02d}"


@dataclass(frozen=True)
class ThrottleState:
    """Timestamp of the last request issued to the remote service.

    Serialized as a single ISO-8601 line so the file stays readable and
    round-trips exactly.
    """

    last_request: datetime | None = None

    def wait_time(self, now: datetime, interval: timedelta) -> timedelta:
        """Remaining time before the next request is allowed (zero when clear).

        Capped at ``interval`` even when ``last_request`` lies in the future.
        """
        if self.last_request is None:
            return timedelta(0)
        remaining = self.last_request + interval - now
        return min(max(remaining, timedelta(0)), interval)

    def to_text(self) -> str:
        if self.last_request is None:
            return ""
        return self.last_request.isoformat() + "\n"

    @classmethod
    def from_text(cls, text: str) -> ThrottleState:
        """Parse serialized state. Raises ValueError on malformed content."""
        text = text.strip()
        if not text:
            return cls()
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return cls(last_request=parsed)
