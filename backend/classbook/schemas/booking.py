"""Pydantic schemas for Bookings."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from classbook.models.booking import BookingStatus
from classbook.schemas.common import DateKey, TimeOfDay


class BookingCreate(BaseModel):
    classroom_id: str
    date: DateKey
    start_time: TimeOfDay
    end_time: TimeOfDay


class BookingUpdate(BaseModel):
    date: Optional[DateKey] = None
    start_time: Optional[TimeOfDay] = None
    end_time: Optional[TimeOfDay] = None


class BookingOut(BaseModel):
    booking_id: str
    classroom_id: str
    user_id: str
    user_name: str
    user_email: str
    date: str
    start_time: str
    end_time: str
    duration_minutes: int
    status: BookingStatus
    cancelled_at: Optional[datetime] = None
    cancelled_by_user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
