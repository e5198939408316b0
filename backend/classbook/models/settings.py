"""OperatingSettings ORM model — the single global operating policy row."""
from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.sql import func
from classbook.database import Base
from classbook.services.time_slots import format_time

GLOBAL_SETTINGS_ID = "global"


class OperatingSettings(Base):
    __tablename__ = "operating_settings"

    settings_id = Column(String(36), primary_key=True, default=GLOBAL_SETTINGS_ID)
    operating_start_minute = Column(Integer, nullable=False)
    operating_end_minute = Column(Integer, nullable=False)
    # -1 or 0 = unlimited
    default_daily_cap_minutes = Column(Integer, nullable=False)
    slot_granularity_minutes = Column(Integer, nullable=False)
    updated_by = Column(String(36), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def operating_start(self) -> str:
        return format_time(self.operating_start_minute)

    @property
    def operating_end(self) -> str:
        return format_time(self.operating_end_minute)
