"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from classbook.models.user import UserRole


class UserCreate(BaseModel):
    display_name: str
    email: str
    role: UserRole = UserRole.student
    assigned_classrooms: list[str] = []


class UserOut(BaseModel):
    user_id: str
    display_name: str
    email: str
    role: UserRole
    assigned_classrooms: list[str] = []
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    display_name: Optional[str] = None
    role: Optional[UserRole] = None
    assigned_classrooms: Optional[list[str]] = None
    is_active: Optional[bool] = None
