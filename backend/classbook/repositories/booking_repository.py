import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classbook.errors import SlotConflictError, NotFoundError
from classbook.models.booking import Booking, BookingSlotClaim, BookingStatus, CLAIM_CELL_MINUTES
from classbook.repositories.base import translate_store_errors

logger = logging.getLogger(__name__)

_INTERVAL_FIELDS = ("date", "start_minute", "end_minute")


def _in_date_range(query, start_date: Optional[str], end_date: Optional[str]):
    """Bound a booking query by inclusive date keys (either side may be open), ordered by date and start."""
    if start_date:
        query = query.filter(Booking.date >= start_date)
    if end_date:
        query = query.filter(Booking.date <= end_date)
    return query.order_by(Booking.date, Booking.start_minute)


class BookingRepository:
    """Reservation store backed by SQLAlchemy.

    Writes keep ``booking_slot_claims`` in step with the live bookings in the
    same transaction, so an overlapping insert that slipped past the read-side
    conflict check still fails here with SlotConflictError.
    """

    def __init__(self, session: Session):
        self.session = session

    @translate_store_errors
    def find_by_id(self, booking_id: str) -> Optional[Booking]:
        return self.session.query(Booking).filter(Booking.booking_id == booking_id).first()

    @translate_store_errors
    def find_by_classroom_and_date(self, classroom_id: str, date: str) -> list[Booking]:
        return (
            self.session.query(Booking)
            .filter(Booking.classroom_id == classroom_id, Booking.date == date)
            .order_by(Booking.start_minute)
            .all()
        )

    @translate_store_errors
    def find_by_classroom_and_date_range(
        self, classroom_id: str, start_date: Optional[str] = None, end_date: Optional[str] = None,
    ) -> list[Booking]:
        query = self.session.query(Booking).filter(Booking.classroom_id == classroom_id)
        return _in_date_range(query, start_date, end_date).all()

    @translate_store_errors
    def find_by_date_range(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> list[Booking]:
        return _in_date_range(self.session.query(Booking), start_date, end_date).all()

    @translate_store_errors
    def find_by_requester(
        self, user_id: str, start_date: Optional[str] = None, end_date: Optional[str] = None,
    ) -> list[Booking]:
        query = self.session.query(Booking).filter(Booking.user_id == user_id)
        return _in_date_range(query, start_date, end_date).all()

    @translate_store_errors
    def find_by_requester_classroom_and_date(self, user_id: str, classroom_id: str, date: str) -> list[Booking]:
        return (
            self.session.query(Booking)
            .filter(
                Booking.user_id == user_id,
                Booking.classroom_id == classroom_id,
                Booking.date == date,
            )
            .all()
        )

    @translate_store_errors
    def find_pending(self, classroom_id: Optional[str] = None) -> list[Booking]:
        query = self.session.query(Booking).filter(Booking.status == BookingStatus.pending)
        if classroom_id:
            query = query.filter(Booking.classroom_id == classroom_id)
        return query.order_by(Booking.created_at).all()

    @translate_store_errors
    def create(self, booking: Booking) -> Booking:
        where = f"classroom {booking.classroom_id} on {booking.date} {booking.start_time}-{booking.end_time}"
        self.session.add(booking)
        try:
            self.session.flush()
            self._claim(booking)
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.warning("Slot claim rejected for %s: %s", where, exc.orig)
            raise SlotConflictError("Time slot is already booked") from exc
        self.session.refresh(booking)
        return booking

    @translate_store_errors
    def update(self, booking_id: str, **changes) -> Booking:
        booking = self.find_by_id(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")

        interval_changed = any(
            field in changes and changes[field] != getattr(booking, field) for field in _INTERVAL_FIELDS
        )
        for field, value in changes.items():
            setattr(booking, field, value)

        try:
            if booking.status == BookingStatus.cancelled:
                self._release(booking)
            elif interval_changed:
                self._release(booking)
                self._claim(booking)
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.warning("Slot claim rejected while moving booking %s: %s", booking_id, exc.orig)
            raise SlotConflictError("Time slot conflict with existing booking") from exc
        self.session.refresh(booking)
        return booking

    def _claim(self, booking: Booking) -> None:
        first_cell = booking.start_minute - booking.start_minute % CLAIM_CELL_MINUTES
        for minute in range(first_cell, booking.end_minute, CLAIM_CELL_MINUTES):
            self.session.add(BookingSlotClaim(
                classroom_id=booking.classroom_id,
                date=booking.date,
                minute=minute,
                booking_id=booking.booking_id,
            ))
        self.session.flush()

    def _release(self, booking: Booking) -> None:
        # Bulk delete runs immediately, before any new claims are flushed.
        self.session.query(BookingSlotClaim).filter(
            BookingSlotClaim.booking_id == booking.booking_id
        ).delete(synchronize_session="fetch")
