import logging
from typing import Optional

from sqlalchemy.orm import Session

from classbook.config import settings as app_settings
from classbook.models.settings import OperatingSettings, GLOBAL_SETTINGS_ID
from classbook.repositories.base import translate_store_errors
from classbook.services.time_slots import parse_time

logger = logging.getLogger(__name__)


class SettingsRepository:
    """Operating policy provider: one global row, created from config on first read."""

    def __init__(self, session: Session):
        self.session = session

    @translate_store_errors
    def get_global(self) -> OperatingSettings:
        row = self.session.get(OperatingSettings, GLOBAL_SETTINGS_ID)
        if row is None:
            row = OperatingSettings(
                settings_id=GLOBAL_SETTINGS_ID,
                operating_start_minute=parse_time(app_settings.DEFAULT_OPERATING_START),
                operating_end_minute=parse_time(app_settings.DEFAULT_OPERATING_END),
                default_daily_cap_minutes=app_settings.DEFAULT_DAILY_CAP_MINUTES,
                slot_granularity_minutes=app_settings.DEFAULT_SLOT_GRANULARITY_MINUTES,
            )
            self.session.add(row)
            self.session.commit()
            self.session.refresh(row)
            logger.info("Seeded global operating settings from configuration defaults")
        return row

    @translate_store_errors
    def update_global(self, changes: dict, updated_by: Optional[str] = None) -> OperatingSettings:
        row = self.get_global()
        for field, value in changes.items():
            setattr(row, field, value)
        row.updated_by = updated_by
        self.session.commit()
        self.session.refresh(row)
        logger.info("Updated global operating settings (%s) by %s", ", ".join(sorted(changes)), updated_by)
        return row
