"""Usage accounting — minutes a requester holds in one classroom on one date."""
from typing import Optional

from classbook.models.booking import BookingStatus
from classbook.models.classroom import Classroom
from classbook.models.settings import OperatingSettings
from classbook.repositories.booking_repository import BookingRepository

UNLIMITED = -1


def effective_cap(classroom: Classroom, policy: OperatingSettings) -> Optional[int]:
    """Daily cap in minutes that applies in this classroom, or None when unlimited.

    Classroom override: >0 is an explicit cap, -1 is unlimited, 0 defers to the
    global default (where anything <= 0 means unlimited).
    """
    if classroom.daily_cap_minutes > 0:
        return classroom.daily_cap_minutes
    if classroom.daily_cap_minutes == UNLIMITED:
        return None
    if policy.default_daily_cap_minutes > 0:
        return policy.default_daily_cap_minutes
    return None


class UsageAccounting:
    def __init__(self, bookings: BookingRepository):
        self.bookings = bookings

    def total_minutes(
        self,
        requester_id: str,
        classroom_id: str,
        date: str,
        exclude_booking_id: Optional[str] = None,
    ) -> int:
        """Sum of durations of the requester's live bookings; cancelled ones count zero."""
        return sum(
            b.duration_minutes
            for b in self.bookings.find_by_requester_classroom_and_date(requester_id, classroom_id, date)
            if b.status != BookingStatus.cancelled and b.booking_id != exclude_booking_id
        )

    def remaining_minutes(
        self,
        requester_id: str,
        classroom: Classroom,
        policy: OperatingSettings,
        date: str,
        exclude_booking_id: Optional[str] = None,
    ) -> Optional[int]:
        """Minutes still bookable under the effective cap, never below zero; None when unlimited."""
        cap = effective_cap(classroom, policy)
        if cap is None:
            return None
        used = self.total_minutes(requester_id, classroom.classroom_id, date, exclude_booking_id)
        return max(cap - used, 0)
