"""FastAPI dependencies shared by the routers."""
from fastapi import Depends, HTTPException, Query
from sqlalchemy.orm import Session

from classbook.database import get_db
from classbook.models.user import User
from classbook.services.booking_service import BookingPolicyEngine
from classbook.services.notifications import LoggingNotificationSink, NotificationSink

_default_sink = LoggingNotificationSink()


def get_notification_sink() -> NotificationSink:
    return _default_sink


def get_booking_engine(
    db: Session = Depends(get_db),
    notifier: NotificationSink = Depends(get_notification_sink),
) -> BookingPolicyEngine:
    return BookingPolicyEngine.from_session(db, notifier)


def get_actor(
    actor_user_id: str = Query(..., description="ID of the user performing the action"),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the acting user; identity itself is established upstream."""
    user = db.query(User).filter(User.user_id == actor_user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="Acting user not found")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Acting user is deactivated")
    return user
