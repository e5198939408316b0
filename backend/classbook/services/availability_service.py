"""Availability index — free/busy answers for one classroom and date.

Cancelled bookings never occupy anything: a cancelled slot is free.
"""
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from classbook.models.booking import Booking
from classbook.models.classroom import Classroom
from classbook.models.settings import OperatingSettings
from classbook.repositories.booking_repository import BookingRepository
from classbook.services.time_slots import TimeRange, generate_slots, overlaps, format_time

logger = logging.getLogger(__name__)


@dataclass
class SlotCell:
    start: int
    end: int
    booking: Optional[Booking] = None

    @property
    def available(self) -> bool:
        return self.booking is None

    @property
    def start_time(self) -> str:
        return format_time(self.start)

    @property
    def end_time(self) -> str:
        return format_time(self.end)


def active_bookings(bookings: Iterable[Booking]) -> list[Booking]:
    return [b for b in bookings if b.is_active]


def build_grid(
    operating_start: int,
    operating_end: int,
    granularity_minutes: int,
    bookings: Iterable[Booking],
) -> list[SlotCell]:
    """Tag every generated slot as available or occupied.

    A slot is occupied when its start boundary falls inside ``[start, end)`` of
    a live booking. Each slot ends at the next boundary, the last one at the
    operating end.
    """
    live = active_bookings(bookings)
    boundaries = generate_slots(operating_start, operating_end, granularity_minutes)
    grid = []
    for index, slot_start in enumerate(boundaries):
        slot_end = boundaries[index + 1] if index + 1 < len(boundaries) else operating_end
        occupant = next(
            (b for b in live if b.start_minute <= slot_start < b.end_minute),
            None,
        )
        grid.append(SlotCell(start=slot_start, end=slot_end, booking=occupant))
    return grid


class AvailabilityIndex:
    def __init__(self, bookings: BookingRepository):
        self.bookings = bookings

    def find_conflicts(
        self,
        classroom_id: str,
        date: str,
        start: int,
        end: int,
        exclude_booking_id: Optional[str] = None,
    ) -> list[Booking]:
        """Live bookings of the classroom on that date that overlap ``[start, end)``."""
        candidate = TimeRange(start, end)
        return [
            b
            for b in active_bookings(self.bookings.find_by_classroom_and_date(classroom_id, date))
            if b.booking_id != exclude_booking_id and overlaps(candidate, TimeRange(b.start_minute, b.end_minute))
        ]

    def has_conflict(
        self,
        classroom_id: str,
        date: str,
        start: int,
        end: int,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        return bool(self.find_conflicts(classroom_id, date, start, end, exclude_booking_id))

    def day_grid(self, classroom_id: str, date: str, policy: OperatingSettings) -> list[SlotCell]:
        return build_grid(
            policy.operating_start_minute,
            policy.operating_end_minute,
            policy.slot_granularity_minutes,
            self.bookings.find_by_classroom_and_date(classroom_id, date),
        )

    def find_available_classrooms(
        self,
        classrooms: Iterable[Classroom],
        date: str,
        start: int,
        end: int,
    ) -> dict[str, Any]:
        """Split classrooms into those free for ``[start, end)`` on ``date`` and those that are not."""
        result: dict[str, Any] = {"available": [], "unavailable": []}
        for classroom in classrooms:
            if not classroom.is_active:
                result["unavailable"].append({"classroom": classroom, "reason": "Classroom is inactive"})
                continue
            conflicts = self.find_conflicts(classroom.classroom_id, date, start, end)
            if conflicts:
                booked = ", ".join(f"{b.start_time}-{b.end_time}" for b in conflicts)
                result["unavailable"].append({"classroom": classroom, "reason": f"Booked {booked}"})
            else:
                result["available"].append(classroom)

        logger.info(
            "Availability search on %s %s-%s: %d available, %d unavailable",
            date, format_time(start), format_time(end), len(result["available"]), len(result["unavailable"]),
        )
        return result
