"""Classroom configuration API routes."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from classbook.database import get_db
from classbook.dependencies import get_actor
from classbook.models.classroom import Classroom
from classbook.models.user import User
from classbook.repositories.classroom_repository import ClassroomRepository
from classbook.schemas.classroom import ClassroomCreate, ClassroomUpdate, ClassroomOut

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=ClassroomOut, status_code=status.HTTP_201_CREATED)
def create_classroom(payload: ClassroomCreate, actor: User = Depends(get_actor), db: Session = Depends(get_db)):
    """Create a classroom (administrators only)."""
    if not actor.is_at_least_admin():
        raise HTTPException(status_code=403, detail="Only administrators may create classrooms")
    if db.query(Classroom).filter(Classroom.name == payload.name).first():
        raise HTTPException(status_code=409, detail="A classroom with this name already exists")

    classroom = Classroom(**payload.model_dump())
    db.add(classroom)
    db.commit()
    db.refresh(classroom)
    logger.info("Created classroom '%s' (%s) by %s", classroom.name, classroom.classroom_id, actor.user_id)
    return classroom


@router.get("/", response_model=list[ClassroomOut])
def list_classrooms(active_only: bool = False, db: Session = Depends(get_db)):
    """List classrooms, optionally only the active ones."""
    return ClassroomRepository(db).list_all(active_only)


@router.get("/{classroom_id}", response_model=ClassroomOut)
def get_classroom(classroom_id: str, db: Session = Depends(get_db)):
    """Fetch a single classroom by ID."""
    classroom = db.query(Classroom).filter(Classroom.classroom_id == classroom_id).first()
    if not classroom:
        raise HTTPException(status_code=404, detail="Classroom not found")
    return classroom


@router.patch("/{classroom_id}", response_model=ClassroomOut)
def update_classroom(
    classroom_id: str,
    payload: ClassroomUpdate,
    actor: User = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Update classroom configuration (partial update, classroom administrators only)."""
    classroom = db.query(Classroom).filter(Classroom.classroom_id == classroom_id).first()
    if not classroom:
        raise HTTPException(status_code=404, detail="Classroom not found")
    if not actor.can_manage_classroom(classroom):
        raise HTTPException(status_code=403, detail="Not authorized to manage this classroom")

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(classroom, field, value)
    db.commit()
    db.refresh(classroom)
    logger.info("Updated classroom %s by %s", classroom_id, actor.user_id)
    return classroom
