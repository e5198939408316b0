"""Booking rule violations.

Every rejection the policy engine can produce is a ``BookingError``. They are
``HTTPException`` subclasses so the API layer renders them as-is; library
callers simply catch ``BookingError``.  ``detail`` is always a dict carrying a
stable ``code`` and a human-readable ``message`` (plus rule-specific extras).
"""
from fastapi import HTTPException, status


class BookingError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "booking_error"

    def __init__(self, message: str, **extra):
        self.message = message
        self.extra = extra
        super().__init__(
            status_code=type(self).status_code,
            detail={"code": self.code, "message": message, **extra},
        )

    def __str__(self) -> str:
        return self.message


class ClassroomInactiveError(BookingError):
    status_code = status.HTTP_409_CONFLICT
    code = "classroom_inactive"


class PermissionDeniedError(BookingError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "permission_denied"


class OutsideOperatingHoursError(BookingError):
    code = "outside_operating_hours"


class InvalidIntervalError(BookingError):
    code = "invalid_interval"


class SlotConflictError(BookingError):
    status_code = status.HTTP_409_CONFLICT
    code = "slot_conflict"


class DailyCapExceededError(BookingError):
    code = "daily_cap_exceeded"

    @property
    def remaining_minutes(self) -> int:
        return self.extra["remaining_minutes"]


class NotFoundError(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class AlreadyCancelledError(BookingError):
    status_code = status.HTTP_409_CONFLICT
    code = "already_cancelled"


class NotPendingError(BookingError):
    status_code = status.HTTP_409_CONFLICT
    code = "not_pending"


class CollaboratorUnavailableError(BookingError):
    """The store or another collaborator could not be reached."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "collaborator_unavailable"
