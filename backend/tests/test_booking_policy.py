"""Tests for the booking policy engine: create rules, their order, and the daily cap."""
import pytest

from classbook.errors import (
    BookingError,
    ClassroomInactiveError,
    DailyCapExceededError,
    InvalidIntervalError,
    NotFoundError,
    OutsideOperatingHoursError,
    PermissionDeniedError,
    SlotConflictError,
)
from classbook.models.booking import BookingStatus
from classbook.models.classroom import ClassroomPermission
from classbook.models.user import UserRole
from classbook.services.notifications import BookingCreated
from classbook.services.time_slots import parse_time
from tests.conftest import DAY, configure_policy, make_classroom, make_user


def _book(engine, room, user, start, end, date=DAY):
    return engine.create_booking(room.classroom_id, user, date, parse_time(start), parse_time(end))


@pytest.fixture
def policy(db):
    return configure_policy(db, "08:00", "18:00", cap=60, granularity=15)


@pytest.fixture
def room(db, policy):
    return make_classroom(db, "Room R")


@pytest.fixture
def student(db):
    return make_user(db, "Alice")


class TestCreateStatus:
    """Initial status: confirmed unless a student books an approval-gated room."""

    def test_student_in_open_room_is_confirmed(self, engine, room, student):
        booking = _book(engine, room, student, "09:00", "10:00")
        assert booking.status == BookingStatus.confirmed
        assert booking.user_name == "Alice"
        assert booking.start_time == "09:00"
        assert booking.end_time == "10:00"

    def test_student_in_approval_room_is_pending(self, db, engine, policy, student):
        gated = make_classroom(db, "Lab", requires_approval=True)
        booking = _book(engine, gated, student, "09:00", "10:00")
        assert booking.status == BookingStatus.pending

    def test_admin_in_approval_room_is_confirmed(self, db, engine, policy):
        gated = make_classroom(db, "Lab", requires_approval=True)
        admin = make_user(db, "Ada Admin", UserRole.admin)
        booking = _book(engine, gated, admin, "09:00", "10:00")
        assert booking.status == BookingStatus.confirmed

    def test_created_event_published(self, engine, room, student, notifications):
        booking = _book(engine, room, student, "09:00", "10:00")
        created = notifications.of_type(BookingCreated)
        assert len(created) == 1
        assert created[0].booking["booking_id"] == booking.booking_id
        assert created[0].classroom_name == "Room R"
        assert not created[0].needs_approval


class TestCreateRules:
    def test_unknown_classroom(self, engine, policy, student):
        with pytest.raises(NotFoundError):
            engine.create_booking("no-such-room", student, DAY, parse_time("09:00"), parse_time("10:00"))

    def test_inactive_classroom(self, db, engine, policy, student):
        closed = make_classroom(db, "Closed", is_active=False)
        with pytest.raises(ClassroomInactiveError):
            _book(engine, closed, student, "09:00", "10:00")

    def test_admin_only_room_rejects_students(self, db, engine, policy, student):
        staff = make_classroom(db, "Staff Room", permission=ClassroomPermission.admin_only)
        with pytest.raises(PermissionDeniedError):
            _book(engine, staff, student, "09:00", "10:00")

    def test_admin_only_room_accepts_admins(self, db, engine, policy):
        staff = make_classroom(db, "Staff Room", permission=ClassroomPermission.admin_only)
        admin = make_user(db, "Ada Admin", UserRole.admin)
        assert _book(engine, staff, admin, "09:00", "10:00").status == BookingStatus.confirmed

    def test_start_before_opening(self, engine, room, student):
        with pytest.raises(OutsideOperatingHoursError) as exc_info:
            _book(engine, room, student, "07:45", "08:30")
        assert exc_info.value.detail["operating_start"] == "08:00"
        assert exc_info.value.detail["operating_end"] == "18:00"
        assert "08:00 - 18:00" in exc_info.value.message

    def test_end_after_closing(self, engine, room, student):
        with pytest.raises(OutsideOperatingHoursError):
            _book(engine, room, student, "17:30", "18:15")

    def test_ending_exactly_at_closing_is_allowed(self, engine, room, student):
        assert _book(engine, room, student, "17:00", "18:00").end_time == "18:00"

    def test_empty_interval(self, engine, room, student):
        with pytest.raises(InvalidIntervalError):
            _book(engine, room, student, "09:00", "09:00")

    def test_reversed_interval(self, engine, room, student):
        with pytest.raises(InvalidIntervalError):
            _book(engine, room, student, "10:00", "09:00")

    def test_misaligned_start(self, engine, room, student):
        with pytest.raises(InvalidIntervalError):
            _book(engine, room, student, "09:05", "09:50")

    def test_unaligned_closing_time_is_a_valid_end(self, db, engine, room, student):
        configure_policy(db, "08:00", "17:50", cap=60, granularity=15)
        booking = _book(engine, room, student, "17:30", "17:50")
        assert booking.duration_minutes == 20

    def test_overlap_is_a_conflict(self, db, engine, room, student):
        other = make_user(db, "Bob")
        first = _book(engine, room, student, "09:00", "10:00")
        with pytest.raises(SlotConflictError) as exc_info:
            _book(engine, room, other, "09:30", "10:30")
        assert exc_info.value.detail["conflicting_booking_ids"] == [first.booking_id]

    def test_back_to_back_is_not_a_conflict(self, db, engine, room, student):
        other = make_user(db, "Bob")
        _book(engine, room, student, "09:00", "10:00")
        assert _book(engine, room, other, "10:00", "11:00").start_time == "10:00"

    def test_same_time_in_another_classroom(self, db, engine, room, student):
        other_room = make_classroom(db, "Room S")
        other = make_user(db, "Bob")
        _book(engine, room, student, "09:00", "10:00")
        assert _book(engine, other_room, other, "09:00", "10:00").status == BookingStatus.confirmed

    def test_same_time_on_another_date(self, db, engine, room, student):
        _book(engine, room, student, "09:00", "10:00")
        assert _book(engine, room, student, "09:00", "10:00", date="2026-03-03").date == "2026-03-03"

    def test_all_rejections_are_booking_errors(self, engine, room, student):
        with pytest.raises(BookingError) as exc_info:
            _book(engine, room, student, "06:00", "07:00")
        assert exc_info.value.detail["code"] == "outside_operating_hours"


class TestRuleOrder:
    """The first violated rule wins."""

    def test_inactive_before_operating_hours(self, db, engine, policy, student):
        closed = make_classroom(db, "Closed", is_active=False)
        with pytest.raises(ClassroomInactiveError):
            _book(engine, closed, student, "06:00", "07:00")

    def test_permission_before_operating_hours(self, db, engine, policy, student):
        staff = make_classroom(db, "Staff Room", permission=ClassroomPermission.admin_only)
        with pytest.raises(PermissionDeniedError):
            _book(engine, staff, student, "06:00", "07:00")

    def test_operating_hours_before_interval(self, engine, room, student):
        with pytest.raises(OutsideOperatingHoursError):
            _book(engine, room, student, "07:00", "06:00")

    def test_conflict_before_cap(self, db, engine, room, student):
        other = make_user(db, "Bob")
        _book(engine, room, other, "09:00", "10:00")
        with pytest.raises(SlotConflictError):
            _book(engine, room, student, "09:00", "11:00")


class TestDailyCap:
    def test_exactly_the_cap_succeeds(self, engine, room, student):
        assert _book(engine, room, student, "09:00", "10:00").duration_minutes == 60

    def test_one_minute_over_reports_full_remaining(self, engine, room, student):
        with pytest.raises(DailyCapExceededError) as exc_info:
            _book(engine, room, student, "09:00", "10:01")
        assert exc_info.value.remaining_minutes == 60
        assert exc_info.value.detail["cap_minutes"] == 60

    def test_after_using_the_cap_nothing_remains(self, engine, room, student):
        _book(engine, room, student, "09:00", "10:00")
        with pytest.raises(DailyCapExceededError) as exc_info:
            _book(engine, room, student, "10:00", "11:01")
        assert exc_info.value.remaining_minutes == 0
        assert "0 minutes remaining" in exc_info.value.message

    def test_partial_usage(self, engine, room, student):
        _book(engine, room, student, "09:00", "09:45")
        with pytest.raises(DailyCapExceededError) as exc_info:
            _book(engine, room, student, "11:00", "11:30")
        assert exc_info.value.remaining_minutes == 15
        assert _book(engine, room, student, "11:00", "11:15").duration_minutes == 15

    def test_pending_bookings_count(self, db, engine, policy, student):
        gated = make_classroom(db, "Lab", requires_approval=True)
        _book(engine, gated, student, "09:00", "10:00")
        with pytest.raises(DailyCapExceededError):
            _book(engine, gated, student, "11:00", "11:15")

    def test_cancelled_bookings_do_not_count(self, engine, room, student):
        first = _book(engine, room, student, "09:00", "10:00")
        engine.cancel_booking(first.booking_id, student)
        assert _book(engine, room, student, "11:00", "12:00").duration_minutes == 60

    def test_cap_is_per_classroom(self, db, engine, room, student):
        other_room = make_classroom(db, "Room S")
        _book(engine, room, student, "09:00", "10:00")
        assert _book(engine, other_room, student, "09:00", "10:00").duration_minutes == 60

    def test_cap_is_per_date(self, engine, room, student):
        _book(engine, room, student, "09:00", "10:00")
        assert _book(engine, room, student, "09:00", "10:00", date="2026-03-03").duration_minutes == 60

    def test_cap_is_per_requester(self, db, engine, room, student):
        other = make_user(db, "Bob")
        _book(engine, room, student, "09:00", "10:00")
        assert _book(engine, room, other, "10:00", "11:00").duration_minutes == 60

    def test_classroom_unlimited(self, db, engine, policy, student):
        hall = make_classroom(db, "Hall", daily_cap_minutes=-1)
        assert _book(engine, hall, student, "08:00", "18:00").duration_minutes == 600

    def test_classroom_override(self, db, engine, policy, student):
        studio = make_classroom(db, "Studio", daily_cap_minutes=120)
        assert _book(engine, studio, student, "09:00", "11:00").duration_minutes == 120
        with pytest.raises(DailyCapExceededError) as exc_info:
            _book(engine, studio, student, "12:00", "12:15")
        assert exc_info.value.detail["cap_minutes"] == 120

    def test_classroom_defers_to_global_default(self, db, engine, room, student):
        configure_policy(db, cap=30)
        with pytest.raises(DailyCapExceededError) as exc_info:
            _book(engine, room, student, "09:00", "09:45")
        assert exc_info.value.remaining_minutes == 30

    def test_global_default_unlimited(self, db, engine, room, student):
        configure_policy(db, cap=-1)
        assert _book(engine, room, student, "09:00", "12:00").duration_minutes == 180


class TestEndToEnd:
    def test_booking_day_for_one_classroom(self, db, engine, room, student):
        other = make_user(db, "Bob")

        first = _book(engine, room, student, "09:00", "10:00")
        assert first.status == BookingStatus.confirmed

        with pytest.raises(SlotConflictError):
            _book(engine, room, other, "09:30", "10:30")

        with pytest.raises(DailyCapExceededError) as exc_info:
            _book(engine, room, student, "10:00", "10:30")
        assert exc_info.value.remaining_minutes == 0

        cancelled = engine.cancel_booking(first.booking_id, student)
        assert cancelled.status == BookingStatus.cancelled

        second = _book(engine, room, other, "09:30", "10:30")
        assert second.status == BookingStatus.confirmed
