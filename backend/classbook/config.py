"""Application configuration via environment variables."""
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings

from classbook.services.time_slots import check_granularity, check_operating_time, parse_time


class Settings(BaseSettings):
    """App settings loaded from .env or environment.

    The DEFAULT_* values seed the persisted operating policy the first time
    it is read; after that the stored row wins. They obey the same rules as
    a policy update through the API.
    """

    DATABASE_URL: str = "sqlite:///./classroom_booking.db"
    CORS_ORIGINS: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"

    DEFAULT_OPERATING_START: str = "08:00"
    DEFAULT_OPERATING_END: str = "18:00"
    DEFAULT_DAILY_CAP_MINUTES: int = 60
    DEFAULT_SLOT_GRANULARITY_MINUTES: int = 15

    @field_validator("DEFAULT_OPERATING_START", "DEFAULT_OPERATING_END")
    @classmethod
    def _operating_time(cls, value: str) -> str:
        return check_operating_time(value)

    @field_validator("DEFAULT_SLOT_GRANULARITY_MINUTES")
    @classmethod
    def _granularity(cls, value: int) -> int:
        return check_granularity(value)

    @field_validator("DEFAULT_DAILY_CAP_MINUTES")
    @classmethod
    def _cap(cls, value: int) -> int:
        if value < -1:
            raise ValueError("DEFAULT_DAILY_CAP_MINUTES must be -1 (unlimited) or more")
        return value

    @model_validator(mode="after")
    def _opening_before_closing(self) -> "Settings":
        if parse_time(self.DEFAULT_OPERATING_START) >= parse_time(self.DEFAULT_OPERATING_END):
            raise ValueError("DEFAULT_OPERATING_START must be before DEFAULT_OPERATING_END")
        return self

    class Config:
        env_file = ".env"
        validate_assignment = True


settings = Settings()
