"""Pydantic schemas for Venues, areas and default reviewers."""
from typing import Optional
from pydantic import BaseModel, Field


class VenueCreate(BaseModel):
    name: str = Field(min_length=1, max_length=150)


class VenueOut(BaseModel):
    id: str
    name: str

    model_config = {"from_attributes": True}


class VenueAreaCreate(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    capacity: Optional[int] = Field(default=None, ge=0)


class VenueAreaOut(BaseModel):
    id: str
    venue_id: str
    name: str
    capacity: Optional[int] = None

    model_config = {"from_attributes": True}


class DefaultReviewerCreate(BaseModel):
    reviewer_id: str


class DefaultReviewerOut(BaseModel):
    venue_id: str
    reviewer_id: str

    model_config = {"from_attributes": True}
