"""Global operating policy API routes."""
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from classbook.database import get_db
from classbook.dependencies import get_actor
from classbook.models.user import User, UserRole
from classbook.repositories.settings_repository import SettingsRepository
from classbook.schemas.settings import SettingsOut, SettingsUpdate
from classbook.services.time_slots import parse_time

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=SettingsOut)
def get_settings(db: Session = Depends(get_db)):
    """Current operating hours, default daily cap and slot granularity."""
    return SettingsRepository(db).get_global()


@router.put("/", response_model=SettingsOut)
def update_settings(payload: SettingsUpdate, actor: User = Depends(get_actor), db: Session = Depends(get_db)):
    """Change the global operating policy (super admins only)."""
    if actor.role != UserRole.super_admin:
        raise HTTPException(status_code=403, detail="Only super admins may change settings")

    repo = SettingsRepository(db)
    current = repo.get_global()
    data = payload.model_dump(exclude_unset=True, exclude_none=True)

    changes = {}
    if "operating_start" in data:
        changes["operating_start_minute"] = parse_time(data["operating_start"])
    if "operating_end" in data:
        changes["operating_end_minute"] = parse_time(data["operating_end"])
    for field in ("default_daily_cap_minutes", "slot_granularity_minutes"):
        if field in data:
            changes[field] = data[field]

    start = changes.get("operating_start_minute", current.operating_start_minute)
    end = changes.get("operating_end_minute", current.operating_end_minute)
    if start >= end:
        raise HTTPException(status_code=400, detail="Operating hours must start before they end")

    return repo.update_global(changes, updated_by=actor.user_id)
