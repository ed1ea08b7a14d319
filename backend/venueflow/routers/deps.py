"""Shared router dependencies."""
from fastapi import Depends, Query
from sqlalchemy.orm import Session

from venueflow.database import get_db
from venueflow.models.user import User
from venueflow.services.policy import load_actor


def get_actor(
    actor_id: str = Query(..., description="ID of the user performing the action"),
    db: Session = Depends(get_db),
) -> User:
    return load_actor(db, actor_id)
