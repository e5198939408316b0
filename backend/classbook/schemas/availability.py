"""Pydantic schemas for availability and usage queries."""
from typing import Optional
from pydantic import BaseModel

from classbook.schemas.booking import BookingOut
from classbook.schemas.classroom import ClassroomOut


class SlotOut(BaseModel):
    start_time: str
    end_time: str
    available: bool
    booking: Optional[BookingOut] = None

    model_config = {"from_attributes": True}


class DayGridOut(BaseModel):
    classroom_id: str
    date: str
    slot_granularity_minutes: int
    slots: list[SlotOut]


class UnavailableClassroomOut(BaseModel):
    classroom: ClassroomOut
    reason: str


class ClassroomSearchOut(BaseModel):
    date: str
    start_time: str
    end_time: str
    available: list[ClassroomOut]
    unavailable: list[UnavailableClassroomOut]


class UsageOut(BaseModel):
    user_id: str
    classroom_id: str
    date: str
    used_minutes: int
    cap_minutes: Optional[int] = None
    remaining_minutes: Optional[int] = None
