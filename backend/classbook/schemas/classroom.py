"""Pydantic schemas for Classrooms."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from classbook.models.classroom import ClassroomPermission


class ClassroomCreate(BaseModel):
    name: str
    description: Optional[str] = None
    permission: ClassroomPermission = ClassroomPermission.student
    requires_approval: bool = False
    daily_cap_minutes: int = Field(0, ge=-1, description="0 = global default, -1 = unlimited")
    is_active: bool = True
    assigned_admins: list[str] = []


class ClassroomUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    permission: Optional[ClassroomPermission] = None
    requires_approval: Optional[bool] = None
    daily_cap_minutes: Optional[int] = Field(None, ge=-1)
    is_active: Optional[bool] = None
    assigned_admins: Optional[list[str]] = None


class ClassroomOut(BaseModel):
    classroom_id: str
    name: str
    description: Optional[str] = None
    permission: ClassroomPermission
    requires_approval: bool
    daily_cap_minutes: int
    is_active: bool
    assigned_admins: list[str] = []
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
