"""Booking policy engine — the only way bookings are created or change state.

Responsibilities:
- Create: classroom state, permission, operating hours, interval, conflicts, daily cap,
  then the initial status (confirmed vs pending approval)
- Modify: ownership/authority, re-validation of the new date and time
- Cancel / approve / reject: the status machine
  pending → {confirmed, cancelled}, confirmed → {cancelled}, cancelled is terminal
- One notification event per committed state change

Rules are checked in a fixed order and the first violation is raised.
"""
import functools
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.orm import Session

from classbook.errors import (
    BookingError,
    ClassroomInactiveError,
    PermissionDeniedError,
    OutsideOperatingHoursError,
    InvalidIntervalError,
    SlotConflictError,
    DailyCapExceededError,
    NotFoundError,
    AlreadyCancelledError,
    NotPendingError,
)
from classbook.models.booking import Booking, BookingStatus
from classbook.models.classroom import Classroom
from classbook.models.settings import OperatingSettings
from classbook.models.user import User
from classbook.repositories.booking_repository import BookingRepository
from classbook.repositories.classroom_repository import ClassroomRepository
from classbook.repositories.settings_repository import SettingsRepository
from classbook.services.availability_service import AvailabilityIndex
from classbook.services.notifications import (
    BookingEvent,
    BookingCreated,
    BookingModified,
    BookingCancelled,
    BookingApproved,
    BookingRejected,
    LoggingNotificationSink,
    NotificationSink,
)
from classbook.services.time_slots import TimeRange, is_aligned, format_time
from classbook.services.usage_service import UsageAccounting, effective_cap

logger = logging.getLogger(__name__)


def _booking_snapshot(booking: Booking) -> dict[str, Any]:
    """Serialize a booking to a JSON-safe dict for notification events."""
    return {
        "booking_id": booking.booking_id,
        "classroom_id": booking.classroom_id,
        "user_id": booking.user_id,
        "user_name": booking.user_name,
        "user_email": booking.user_email,
        "date": booking.date,
        "start_time": booking.start_time,
        "end_time": booking.end_time,
        "status": booking.status.value if booking.status else None,
        "cancelled_at": booking.cancelled_at.isoformat() if booking.cancelled_at else None,
        "cancelled_by_user_id": booking.cancelled_by_user_id,
    }


def _log_rejections(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except BookingError as exc:
            logger.warning("%s rejected (%s): %s", method.__name__, exc.code, exc.message)
            raise

    return wrapper


class BookingPolicyEngine:
    def __init__(
        self,
        bookings: BookingRepository,
        classrooms: ClassroomRepository,
        policies: SettingsRepository,
        notifier: NotificationSink,
    ):
        self.bookings = bookings
        self.classrooms = classrooms
        self.policies = policies
        self.notifier = notifier
        self.availability = AvailabilityIndex(bookings)
        self.usage = UsageAccounting(bookings)

    @classmethod
    def from_session(cls, db: Session, notifier: Optional[NotificationSink] = None) -> "BookingPolicyEngine":
        return cls(
            bookings=BookingRepository(db),
            classrooms=ClassroomRepository(db),
            policies=SettingsRepository(db),
            notifier=notifier or LoggingNotificationSink(),
        )

    # ── Commands ─────────────────────────────────────────────────────

    @_log_rejections
    def create_booking(self, classroom_id: str, requester: User, date: str, start: int, end: int) -> Booking:
        classroom = self._get_classroom(classroom_id)

        if not classroom.is_active:
            raise ClassroomInactiveError("Classroom is not active")

        if not classroom.allows_student_booking() and not requester.is_at_least_admin():
            raise PermissionDeniedError("Students cannot book this classroom")

        policy = self.policies.get_global()
        self._validate_interval(
            classroom=classroom,
            policy=policy,
            owner_id=requester.user_id,
            date=date,
            interval=TimeRange(start, end),
        )

        if requester.is_at_least_admin() or not classroom.requires_approval:
            booking_status = BookingStatus.confirmed
        else:
            booking_status = BookingStatus.pending

        booking = self.bookings.create(Booking(
            classroom_id=classroom.classroom_id,
            user_id=requester.user_id,
            user_name=requester.display_name,
            user_email=requester.email,
            date=date,
            start_minute=start,
            end_minute=end,
            status=booking_status,
        ))
        logger.info(
            "Created booking %s in '%s' on %s %s-%s for %s (%s)",
            booking.booking_id, classroom.name, date, booking.start_time, booking.end_time,
            requester.user_id, booking_status.value,
        )

        self._notify(BookingCreated(
            booking=_booking_snapshot(booking),
            classroom_name=classroom.name,
            status=booking_status.value,
        ))
        return booking

    @_log_rejections
    def modify_booking(
        self,
        booking_id: str,
        actor: User,
        date: Optional[str] = None,
        start: Optional[int] = None,
        end: Optional[int] = None,
    ) -> Booking:
        """Move a booking to a new date and/or time.

        The new interval goes through the same checks as a new booking
        (operating hours, alignment, conflicts excluding itself, the owner's
        daily cap excluding its current minutes). Status is left as it is.
        """
        booking = self._get_booking(booking_id)
        classroom = self._get_classroom(booking.classroom_id)

        if not self._may_act_on(actor, booking, classroom):
            raise PermissionDeniedError("Not authorized to modify this booking")

        if booking.status == BookingStatus.cancelled:
            raise AlreadyCancelledError("Cannot modify a cancelled booking")

        new_date = date if date is not None else booking.date
        new_start = start if start is not None else booking.start_minute
        new_end = end if end is not None else booking.end_minute
        if (new_date, new_start, new_end) == (booking.date, booking.start_minute, booking.end_minute):
            return booking

        self._validate_interval(
            classroom=classroom,
            policy=self.policies.get_global(),
            owner_id=booking.user_id,
            date=new_date,
            interval=TimeRange(new_start, new_end),
            exclude_booking_id=booking.booking_id,
        )

        previous = {"date": booking.date, "start_time": booking.start_time, "end_time": booking.end_time}
        updated = self.bookings.update(
            booking.booking_id,
            date=new_date,
            start_minute=new_start,
            end_minute=new_end,
        )
        logger.info(
            "Moved booking %s from %s %s-%s to %s %s-%s (by %s)",
            booking_id, previous["date"], previous["start_time"], previous["end_time"],
            updated.date, updated.start_time, updated.end_time, actor.user_id,
        )

        self._notify(BookingModified(
            booking=_booking_snapshot(updated),
            classroom_name=classroom.name,
            previous=previous,
        ))
        return updated

    @_log_rejections
    def cancel_booking(self, booking_id: str, actor: User) -> Booking:
        booking = self._get_booking(booking_id)

        if booking.status == BookingStatus.cancelled:
            raise AlreadyCancelledError("Booking is already cancelled")

        classroom = self._get_classroom(booking.classroom_id)
        if not self._may_act_on(actor, booking, classroom):
            raise PermissionDeniedError("Not authorized to cancel this booking")

        by_owner = booking.is_owned_by(actor.user_id)
        updated = self.bookings.update(
            booking.booking_id,
            status=BookingStatus.cancelled,
            cancelled_at=datetime.now(timezone.utc),
            cancelled_by_user_id=actor.user_id,
        )
        logger.info("Cancelled booking %s (by %s, owner=%s)", booking_id, actor.user_id, by_owner)

        self._notify(BookingCancelled(
            booking=_booking_snapshot(updated),
            classroom_name=classroom.name,
            by_owner=by_owner,
        ))
        return updated

    @_log_rejections
    def approve_booking(self, booking_id: str, actor: User) -> Booking:
        booking = self._get_booking(booking_id)
        classroom = self._get_classroom(booking.classroom_id)
        self._require_admin(actor, classroom, "approve")

        if booking.status != BookingStatus.pending:
            raise NotPendingError("Booking is not pending approval", status=booking.status.value)

        updated = self.bookings.update(booking.booking_id, status=BookingStatus.confirmed)
        logger.info("Approved booking %s (by %s)", booking_id, actor.user_id)

        self._notify(BookingApproved(booking=_booking_snapshot(updated), classroom_name=classroom.name))
        return updated

    @_log_rejections
    def reject_booking(self, booking_id: str, actor: User) -> Booking:
        booking = self._get_booking(booking_id)
        classroom = self._get_classroom(booking.classroom_id)
        self._require_admin(actor, classroom, "reject")

        if booking.status != BookingStatus.pending:
            raise NotPendingError("Booking is not pending approval", status=booking.status.value)

        updated = self.bookings.update(
            booking.booking_id,
            status=BookingStatus.cancelled,
            cancelled_at=datetime.now(timezone.utc),
            cancelled_by_user_id=actor.user_id,
        )
        logger.info("Rejected booking %s (by %s)", booking_id, actor.user_id)

        self._notify(BookingRejected(booking=_booking_snapshot(updated), classroom_name=classroom.name))
        return updated

    # ── Queries ──────────────────────────────────────────────────────

    def get_booking(self, booking_id: str) -> Booking:
        return self._get_booking(booking_id)

    def bookings_for_classroom(
        self, classroom_id: str, start_date: Optional[str] = None, end_date: Optional[str] = None,
    ) -> list[Booking]:
        return self.bookings.find_by_classroom_and_date_range(classroom_id, start_date, end_date)

    def bookings_for_date_range(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> list[Booking]:
        return self.bookings.find_by_date_range(start_date, end_date)

    def bookings_for_user(
        self, user_id: str, start_date: Optional[str] = None, end_date: Optional[str] = None,
    ) -> list[Booking]:
        return self.bookings.find_by_requester(user_id, start_date, end_date)

    def pending_bookings(self, classroom_id: Optional[str] = None) -> list[Booking]:
        return self.bookings.find_pending(classroom_id)

    # ── Rules ────────────────────────────────────────────────────────

    def _validate_interval(
        self,
        classroom: Classroom,
        policy: OperatingSettings,
        owner_id: str,
        date: str,
        interval: TimeRange,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        op_start = policy.operating_start_minute
        op_end = policy.operating_end_minute

        if not TimeRange(op_start, op_end).contains(interval):
            raise OutsideOperatingHoursError(
                f"Booking must be within operating hours ({format_time(op_start)} - {format_time(op_end)})",
                operating_start=format_time(op_start),
                operating_end=format_time(op_end),
            )

        if interval.start >= interval.end:
            raise InvalidIntervalError("End time must be after start time")

        conflicts = self.availability.find_conflicts(
            classroom.classroom_id, date, interval.start, interval.end, exclude_booking_id,
        )
        if conflicts:
            raise SlotConflictError(
                "Time slot is already booked",
                conflicting_booking_ids=[b.booking_id for b in conflicts],
            )

        remaining = self.usage.remaining_minutes(owner_id, classroom, policy, date, exclude_booking_id)
        if remaining is not None and interval.duration > remaining:
            raise DailyCapExceededError(
                f"Daily time limit exceeded. You have {remaining} minutes remaining for today.",
                remaining_minutes=remaining,
                cap_minutes=effective_cap(classroom, policy),
            )

        # Alignment comes last; an over-cap request reports DailyCapExceeded first.
        if not is_aligned(interval, op_start, op_end, policy.slot_granularity_minutes):
            raise InvalidIntervalError(
                f"Start and end times must fall on {policy.slot_granularity_minutes}-minute slot "
                f"boundaries starting at {format_time(op_start)}"
            )

    def _may_act_on(self, actor: User, booking: Booking, classroom: Classroom) -> bool:
        return booking.is_owned_by(actor.user_id) or actor.can_manage_classroom(classroom)

    def _require_admin(self, actor: User, classroom: Classroom, action: str) -> None:
        if not actor.can_manage_classroom(classroom):
            raise PermissionDeniedError(f"Only an administrator of '{classroom.name}' may {action} bookings")

    def _get_booking(self, booking_id: str) -> Booking:
        booking = self.bookings.find_by_id(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        return booking

    def _get_classroom(self, classroom_id: str) -> Classroom:
        classroom = self.classrooms.get_by_id(classroom_id)
        if classroom is None:
            raise NotFoundError("Classroom not found")
        return classroom

    def _notify(self, event: BookingEvent) -> None:
        try:
            self.notifier.publish(event)
        except Exception:
            logger.exception(
                "Failed to deliver %s for booking %s", event.event_type, event.booking.get("booking_id"),
            )
