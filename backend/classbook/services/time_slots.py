"""Time-slot model — half-open minute-of-day intervals on a single date.

Times are plain integers (minutes since midnight, 24-hour, no seconds).
Dates are opaque ``YYYY-MM-DD`` keys; no timezone conversion happens anywhere.
"""
from dataclasses import dataclass

SLOT_GRANULARITIES = (5, 10, 15, 30, 60)


@dataclass(frozen=True)
class TimeRange:
    """A half-open interval ``[start, end)`` in minutes of day."""

    start: int
    end: int

    @property
    def duration(self) -> int:
        return duration_minutes(self.start, self.end)

    def overlaps(self, other: "TimeRange") -> bool:
        return overlaps(self, other)

    def contains(self, other: "TimeRange") -> bool:
        return self.start <= other.start and other.end <= self.end

    def __str__(self) -> str:
        return f"{format_time(self.start)}-{format_time(self.end)}"


def parse_time(value: str) -> int:
    """Convert ``"HH:MM"`` to minutes of day."""
    try:
        hours, minutes = value.split(":")
        hour, minute = int(hours), int(minutes)
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM") from None
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return hour * 60 + minute


def format_time(minute_of_day: int) -> str:
    """Convert minutes of day to ``"HH:MM"``."""
    return f"{minute_of_day // 60:02d}:{minute_of_day % 60:02d}"


def overlaps(a: TimeRange, b: TimeRange) -> bool:
    """True iff the intervals share at least one minute.

    Back-to-back intervals (``a.end == b.start``) do not overlap.
    """
    return a.start < b.end and a.end > b.start


def duration_minutes(start: int, end: int) -> int:
    return end - start


def generate_slots(operating_start: int, operating_end: int, granularity_minutes: int) -> list[int]:
    """Slot start boundaries from ``operating_start`` up to, not including, ``operating_end``.

    The operating end is a valid end time for the last slot but never a start.
    """
    if granularity_minutes <= 0:
        raise ValueError(f"granularity_minutes must be positive, got {granularity_minutes}")
    return list(range(operating_start, operating_end, granularity_minutes))


def is_slot_boundary(minute: int, operating_start: int, granularity_minutes: int) -> bool:
    return minute >= operating_start and (minute - operating_start) % granularity_minutes == 0


def is_aligned(interval: TimeRange, operating_start: int, operating_end: int, granularity_minutes: int) -> bool:
    """Start must be a generated boundary; end a boundary or the operating end itself."""
    if not is_slot_boundary(interval.start, operating_start, granularity_minutes):
        return False
    return interval.end == operating_end or is_slot_boundary(interval.end, operating_start, granularity_minutes)


def check_operating_time(value: str) -> str:
    """Validate an operating-hours bound; it must sit on the finest slot grid."""
    if parse_time(value) % SLOT_GRANULARITIES[0]:
        raise ValueError(f"operating hours must be on a {SLOT_GRANULARITIES[0]}-minute boundary, got {value}")
    return value


def check_granularity(value: int) -> int:
    if value not in SLOT_GRANULARITIES:
        raise ValueError(f"slot granularity must be one of {SLOT_GRANULARITIES}, got {value}")
    return value
