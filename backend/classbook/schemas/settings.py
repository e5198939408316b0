"""Pydantic schemas for the global operating policy."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from classbook.schemas.common import TimeOfDay
from classbook.services.time_slots import check_granularity, check_operating_time


class SettingsUpdate(BaseModel):
    operating_start: Optional[TimeOfDay] = None
    operating_end: Optional[TimeOfDay] = None
    default_daily_cap_minutes: Optional[int] = Field(None, ge=-1, description="-1 = unlimited")
    slot_granularity_minutes: Optional[int] = None

    @field_validator("operating_start", "operating_end")
    @classmethod
    def _five_minute_boundary(cls, value: Optional[str]) -> Optional[str]:
        return check_operating_time(value) if value is not None else None

    @field_validator("slot_granularity_minutes")
    @classmethod
    def _known_granularity(cls, value: Optional[int]) -> Optional[int]:
        return check_granularity(value) if value is not None else None


class SettingsOut(BaseModel):
    operating_start: str
    operating_end: str
    default_daily_cap_minutes: int
    slot_granularity_minutes: int
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
