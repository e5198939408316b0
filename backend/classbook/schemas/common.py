"""Field types shared by the request schemas."""
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, Field

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def _check_calendar_date(value: str) -> str:
    datetime.strptime(value, "%Y-%m-%d")
    return value


# "HH:MM", 24-hour
TimeOfDay = Annotated[str, Field(pattern=TIME_PATTERN, examples=["09:00"])]

# "YYYY-MM-DD", an opaque calendar key
DateKey = Annotated[
    str,
    Field(pattern=DATE_PATTERN, examples=["2026-03-02"]),
    AfterValidator(_check_calendar_date),
]
