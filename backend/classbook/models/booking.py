"""Booking ORM model and the slot-claim table that backs the no-overlap rule."""
import enum
import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Enum as SAEnum, Index, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from classbook.database import Base
from classbook.services.time_slots import format_time

# Finest slot granularity; operating hours and booking boundaries are multiples of it.
CLAIM_CELL_MINUTES = 5


class BookingStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"


class Booking(Base):
    __tablename__ = "bookings"

    booking_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    classroom_id = Column(String(36), ForeignKey("classrooms.classroom_id"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    user_name = Column(String(100), nullable=False)
    user_email = Column(String(255), nullable=False)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD, no timezone
    start_minute = Column(Integer, nullable=False)
    end_minute = Column(Integer, nullable=False)
    status = Column(SAEnum(BookingStatus), nullable=False, default=BookingStatus.pending)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by_user_id = Column(String(36), ForeignKey("users.user_id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    classroom = relationship("Classroom")

    __table_args__ = (
        Index("ix_bookings_classroom_date", "classroom_id", "date"),
        Index("ix_bookings_user", "user_id"),
        CheckConstraint("start_minute < end_minute", name="ck_bookings_interval"),
    )

    @property
    def start_time(self) -> str:
        return format_time(self.start_minute)

    @property
    def end_time(self) -> str:
        return format_time(self.end_minute)

    @property
    def duration_minutes(self) -> int:
        return self.end_minute - self.start_minute

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.cancelled

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id


class BookingSlotClaim(Base):
    """One row per CLAIM_CELL_MINUTES cell held by a non-cancelled booking.

    The primary key makes two live bookings covering the same cell of the same
    classroom and date impossible, whatever the isolation level of the caller.
    """

    __tablename__ = "booking_slot_claims"

    classroom_id = Column(String(36), primary_key=True)
    date = Column(String(10), primary_key=True)
    minute = Column(Integer, primary_key=True)
    booking_id = Column(String(36), ForeignKey("bookings.booking_id"), nullable=False, index=True)
