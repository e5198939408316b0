"""Booking API routes — delegates to the policy engine for every rule."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from classbook.dependencies import get_actor, get_booking_engine
from classbook.models.user import User
from classbook.schemas.booking import BookingCreate, BookingUpdate, BookingOut
from classbook.schemas.common import DATE_PATTERN
from classbook.services.booking_service import BookingPolicyEngine
from classbook.services.time_slots import parse_time

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    actor: User = Depends(get_actor),
    engine: BookingPolicyEngine = Depends(get_booking_engine),
):
    """Book a classroom for the acting user."""
    return engine.create_booking(
        classroom_id=payload.classroom_id,
        requester=actor,
        date=payload.date,
        start=parse_time(payload.start_time),
        end=parse_time(payload.end_time),
    )


@router.get("/", response_model=list[BookingOut])
def list_bookings(
    classroom_id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, pattern=DATE_PATTERN),
    end_date: Optional[str] = Query(None, pattern=DATE_PATTERN),
    include_cancelled: bool = Query(False),
    engine: BookingPolicyEngine = Depends(get_booking_engine),
):
    """List bookings with optional filters, ordered by date and start time."""
    if classroom_id:
        bookings = engine.bookings_for_classroom(classroom_id, start_date, end_date)
        if user_id:
            bookings = [b for b in bookings if b.is_owned_by(user_id)]
    elif user_id:
        bookings = engine.bookings_for_user(user_id, start_date, end_date)
    else:
        bookings = engine.bookings_for_date_range(start_date, end_date)

    if not include_cancelled:
        bookings = [b for b in bookings if b.is_active]
    return bookings


@router.get("/pending", response_model=list[BookingOut])
def list_pending_bookings(
    classroom_id: Optional[str] = Query(None),
    engine: BookingPolicyEngine = Depends(get_booking_engine),
):
    """Bookings awaiting approval, oldest first."""
    return engine.pending_bookings(classroom_id)


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: str, engine: BookingPolicyEngine = Depends(get_booking_engine)):
    """Fetch a single booking by ID (cancelled ones included)."""
    return engine.get_booking(booking_id)


@router.patch("/{booking_id}", response_model=BookingOut)
def modify_booking(
    booking_id: str,
    payload: BookingUpdate,
    actor: User = Depends(get_actor),
    engine: BookingPolicyEngine = Depends(get_booking_engine),
):
    """Move a booking to another date and/or time (owner or classroom admin)."""
    return engine.modify_booking(
        booking_id=booking_id,
        actor=actor,
        date=payload.date,
        start=parse_time(payload.start_time) if payload.start_time else None,
        end=parse_time(payload.end_time) if payload.end_time else None,
    )


@router.post("/{booking_id}/cancel", response_model=BookingOut)
def cancel_booking(
    booking_id: str,
    actor: User = Depends(get_actor),
    engine: BookingPolicyEngine = Depends(get_booking_engine),
):
    """Cancel a booking (owner or classroom admin). The record is kept."""
    return engine.cancel_booking(booking_id, actor)


@router.post("/{booking_id}/approve", response_model=BookingOut)
def approve_booking(
    booking_id: str,
    actor: User = Depends(get_actor),
    engine: BookingPolicyEngine = Depends(get_booking_engine),
):
    """Confirm a pending booking (classroom admin)."""
    return engine.approve_booking(booking_id, actor)


@router.post("/{booking_id}/reject", response_model=BookingOut)
def reject_booking(
    booking_id: str,
    actor: User = Depends(get_actor),
    engine: BookingPolicyEngine = Depends(get_booking_engine),
):
    """Turn down a pending booking (classroom admin); it ends up cancelled."""
    return engine.reject_booking(booking_id, actor)
