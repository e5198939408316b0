"""Availability API routes — day grids, free-classroom search and usage."""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from classbook.database import get_db
from classbook.errors import NotFoundError
from classbook.repositories.booking_repository import BookingRepository
from classbook.repositories.classroom_repository import ClassroomRepository
from classbook.repositories.settings_repository import SettingsRepository
from classbook.schemas.availability import (
    ClassroomSearchOut,
    DayGridOut,
    SlotOut,
    UnavailableClassroomOut,
    UsageOut,
)
from classbook.schemas.booking import BookingOut
from classbook.schemas.classroom import ClassroomOut
from classbook.schemas.common import DATE_PATTERN, TIME_PATTERN
from classbook.services.availability_service import AvailabilityIndex
from classbook.services.time_slots import parse_time
from classbook.services.usage_service import UsageAccounting, effective_cap

logger = logging.getLogger(__name__)
router = APIRouter()


def _classroom_or_404(db: Session, classroom_id: str):
    classroom = ClassroomRepository(db).get_by_id(classroom_id)
    if not classroom:
        raise NotFoundError("Classroom not found")
    return classroom


@router.get("/classrooms/{classroom_id}/grid", response_model=DayGridOut)
def day_grid(classroom_id: str, date: str = Query(..., pattern=DATE_PATTERN), db: Session = Depends(get_db)):
    """Every slot of the day for one classroom, tagged available or occupied."""
    _classroom_or_404(db, classroom_id)
    policy = SettingsRepository(db).get_global()
    grid = AvailabilityIndex(BookingRepository(db)).day_grid(classroom_id, date, policy)
    return DayGridOut(
        classroom_id=classroom_id,
        date=date,
        slot_granularity_minutes=policy.slot_granularity_minutes,
        slots=[
            SlotOut(
                start_time=cell.start_time,
                end_time=cell.end_time,
                available=cell.available,
                booking=BookingOut.model_validate(cell.booking) if cell.booking else None,
            )
            for cell in grid
        ],
    )


@router.get("/find", response_model=ClassroomSearchOut)
def find_classrooms(
    date: str = Query(..., pattern=DATE_PATTERN),
    start_time: str = Query(..., pattern=TIME_PATTERN),
    end_time: str = Query(..., pattern=TIME_PATTERN),
    db: Session = Depends(get_db),
):
    """Which classrooms are free for the whole of ``[start_time, end_time)`` on ``date``."""
    start, end = parse_time(start_time), parse_time(end_time)
    if start >= end:
        raise HTTPException(status_code=400, detail="End time must be after start time")

    result = AvailabilityIndex(BookingRepository(db)).find_available_classrooms(
        ClassroomRepository(db).list_all(), date, start, end,
    )
    return ClassroomSearchOut(
        date=date,
        start_time=start_time,
        end_time=end_time,
        available=[ClassroomOut.model_validate(c) for c in result["available"]],
        unavailable=[
            UnavailableClassroomOut(classroom=ClassroomOut.model_validate(item["classroom"]), reason=item["reason"])
            for item in result["unavailable"]
        ],
    )


@router.get("/usage", response_model=UsageOut)
def usage(
    user_id: str = Query(...),
    classroom_id: str = Query(...),
    date: str = Query(..., pattern=DATE_PATTERN),
    db: Session = Depends(get_db),
):
    """Minutes a user has booked in a classroom on a date, against the effective cap."""
    classroom = _classroom_or_404(db, classroom_id)
    policy = SettingsRepository(db).get_global()
    accounting = UsageAccounting(BookingRepository(db))
    return UsageOut(
        user_id=user_id,
        classroom_id=classroom_id,
        date=date,
        used_minutes=accounting.total_minutes(user_id, classroom_id, date),
        cap_minutes=effective_cap(classroom, policy),
        remaining_minutes=accounting.remaining_minutes(user_id, classroom, policy, date),
    )
