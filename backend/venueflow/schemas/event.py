"""Pydantic schemas for Events, versions and lifecycle results.

The input models are the request-scoped structs handed to the lifecycle
engine; nothing else carries form state between requests.
"""
from __future__ import annotations
from datetime import datetime
from typing import Any, Literal, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from venueflow.models.approval import Decision
from venueflow.services.clock import to_utc


class EventDraftInput(BaseModel):
    title: str = Field(min_length=3, max_length=150)
    venue_id: str = Field(min_length=1)
    start_at: datetime
    end_at: Optional[datetime] = None
    area_ids: list[str] = []
    intent: Literal["save", "submit"] = "save"

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("area_ids")
    @classmethod
    def _clean_area_ids(cls, value: list[str]) -> list[str]:
        cleaned = []
        for area_id in value:
            area_id = area_id.strip()
            if area_id and area_id not in cleaned:
                cleaned.append(area_id)
        return cleaned

    @field_validator("start_at", "end_at")
    @classmethod
    def _normalise_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc(value) if value is not None else None

    @model_validator(mode="after")
    def _end_after_start(self) -> "EventDraftInput":
        if self.end_at is not None and self.end_at < self.start_at:
            raise ValueError("End date/time must be on or after the start")
        return self


class DecisionInput(BaseModel):
    decision: Decision
    note: Optional[str] = Field(default=None, max_length=2000)


class ReviewerAssignmentInput(BaseModel):
    reviewer_id: str = Field(min_length=1)


class EventOut(BaseModel):
    id: str
    title: str
    venue_id: str
    venue_name: Optional[str] = None
    start_at: datetime
    end_at: Optional[datetime] = None
    status: str
    created_by: str
    assigned_reviewer_id: Optional[str] = None
    area_ids: list[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class EventVersionOut(BaseModel):
    event_id: str
    version: int
    payload: dict[str, Any]
    submitted_at: Optional[datetime] = None
    submitted_by: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class WorkflowResultOut(BaseModel):
    event: EventOut
    version: Optional[int] = None
    reviewer_id: Optional[str] = None
    warnings: list[str] = []
