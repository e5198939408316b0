"""Classroom ORM model — the per-room booking configuration."""
import enum
import uuid
from sqlalchemy import Column, String, Text, Boolean, Integer, DateTime, JSON, Enum as SAEnum
from sqlalchemy.sql import func
from classbook.database import Base


class ClassroomPermission(str, enum.Enum):
    student = "student"
    admin_only = "admin_only"


class Classroom(Base):
    __tablename__ = "classrooms"

    classroom_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(150), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    permission = Column(SAEnum(ClassroomPermission), nullable=False, default=ClassroomPermission.student)
    requires_approval = Column(Boolean, nullable=False, default=False)
    # 0 = use the global default, -1 = unlimited, >0 = cap in minutes
    daily_cap_minutes = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    assigned_admins = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def allows_student_booking(self) -> bool:
        return self.permission == ClassroomPermission.student
