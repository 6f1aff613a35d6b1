"""Schemas for goal intake and lookup."""
from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from app.api.schemas.roadmap import RoadmapResponse, RoadmapSummary


class WeeklySchedule(BaseModel):
    sunday: bool = False
    monday: bool = True
    tuesday: bool = True
    wednesday: bool = True
    thursday: bool = True
    friday: bool = True
    saturday: bool = False


class GoalCreateRequest(BaseModel):
    user_id: UUID
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    current_level: str = Field(default="beginner", min_length=1, max_length=100)
    daily_time_commitment: int = Field(default=30, ge=5, le=480, description="Minutes per available day.")
    start_date: date = Field(default_factory=date.today)
    target_date: Optional[date] = None
    weekly_schedule: WeeklySchedule = Field(default_factory=WeeklySchedule)

    @field_validator("title")
    @classmethod
    def trim_title(cls, value: str) -> str:
        cleaned = value.strip()
        if len(cleaned) < 3:
            raise ValueError("title must be at least 3 characters after trimming")
        return cleaned

    @model_validator(mode="after")
    def target_after_start(self) -> "GoalCreateRequest":
        if self.target_date is not None and self.target_date < self.start_date:
            raise ValueError("target_date must not be before start_date")
        return self


class GoalResponse(BaseModel):
    id: UUID
    user_id: UUID
    title: str
    description: Optional[str]
    current_level: str
    daily_time_commitment: int
    start_date: date
    target_date: Optional[date]
    weekly_schedule: Dict[str, bool]
    created_at: datetime


class GoalCreateResponse(BaseModel):
    goal: GoalResponse
    roadmap: RoadmapResponse
    request_id: str


class GoalDetailResponse(BaseModel):
    goal: GoalResponse
    roadmap: Optional[RoadmapSummary]
    request_id: str
