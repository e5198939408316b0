"""User ORM model — requesters and administrators."""
import enum
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, JSON, Enum as SAEnum
from sqlalchemy.sql import func
from classbook.database import Base


class UserRole(str, enum.Enum):
    student = "student"
    admin = "admin"
    super_admin = "super_admin"

    def is_at_least_admin(self) -> bool:
        return self in (UserRole.admin, UserRole.super_admin)


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    display_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(SAEnum(UserRole), nullable=False, default=UserRole.student)
    assigned_classrooms = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def is_at_least_admin(self) -> bool:
        return UserRole(self.role).is_at_least_admin()

    def can_manage_classroom(self, classroom) -> bool:
        """Super admins manage every classroom; admins only the ones assigned to them."""
        if self.role == UserRole.super_admin:
            return True
        if self.role != UserRole.admin:
            return False
        return (
            classroom.classroom_id in (self.assigned_classrooms or [])
            or self.user_id in (classroom.assigned_admins or [])
        )
