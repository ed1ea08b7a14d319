"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from venueflow.models.user import UserRole


class UserCreate(BaseModel):
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: UserRole = UserRole.venue_manager
    venue_id: Optional[str] = None


class UserOut(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: str
    venue_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
