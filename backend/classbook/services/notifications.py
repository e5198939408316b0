"""Booking notification events and the sink that receives them.

The policy engine publishes one event per state change after the write has
committed. Delivery is the sink's business; a failing sink never undoes a
booking.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingEvent:
    booking: dict[str, Any]
    classroom_name: str

    event_type = "booking"


@dataclass(frozen=True)
class BookingCreated(BookingEvent):
    status: str = "confirmed"

    event_type = "booking_created"

    @property
    def needs_approval(self) -> bool:
        return self.status == "pending"


@dataclass(frozen=True)
class BookingModified(BookingEvent):
    previous: Optional[dict[str, Any]] = None

    event_type = "booking_modified"


@dataclass(frozen=True)
class BookingCancelled(BookingEvent):
    by_owner: bool = True

    event_type = "booking_cancelled"


@dataclass(frozen=True)
class BookingApproved(BookingEvent):
    event_type = "booking_approved"


@dataclass(frozen=True)
class BookingRejected(BookingEvent):
    event_type = "booking_rejected"


class NotificationSink(Protocol):
    def publish(self, event: BookingEvent) -> None:
        ...


class LoggingNotificationSink:
    """Default sink: records every event as a log line instead of sending mail."""

    def publish(self, event: BookingEvent) -> None:
        booking = event.booking
        logger.info(
            "Notification %s → %s <%s>: %s %s %s-%s (%s)",
            event.event_type,
            booking.get("user_name"),
            booking.get("user_email"),
            event.classroom_name,
            booking.get("date"),
            booking.get("start_time"),
            booking.get("end_time"),
            booking.get("status"),
        )
        if isinstance(event, BookingCreated) and event.needs_approval:
            logger.info("Booking %s awaits classroom admin approval", booking.get("booking_id"))
