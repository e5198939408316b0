"""User API routes."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from classbook.database import get_db
from classbook.dependencies import get_actor
from classbook.models.user import User, UserRole
from classbook.schemas.user import UserCreate, UserUpdate, UserOut

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Register a requester or administrator."""
    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=409, detail="A user with this email already exists")
    user = User(**payload.model_dump())
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (%s, %s)", user.user_id, user.display_name, user.role.value)
    return user


@router.get("/", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)):
    """List all users."""
    return db.query(User).order_by(User.display_name).all()


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)):
    """Fetch a single user by ID."""
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.patch("/{user_id}", response_model=UserOut)
def update_user(
    user_id: str,
    payload: UserUpdate,
    actor: User = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Update a user (partial update).

    Anyone may rename themselves; role, classroom assignments and activation
    are changed by super admins only.
    """
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    changes = payload.model_dump(exclude_unset=True)
    privileged = {"role", "assigned_classrooms", "is_active"} & changes.keys()
    if privileged and actor.role != UserRole.super_admin:
        raise HTTPException(status_code=403, detail="Only super admins may change roles or assignments")
    if not privileged and actor.user_id != user_id and actor.role != UserRole.super_admin:
        raise HTTPException(status_code=403, detail="Not authorized to update this user")

    for field, value in changes.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("Updated user %s (%s) by %s", user_id, ", ".join(sorted(changes)), actor.user_id)
    return user
