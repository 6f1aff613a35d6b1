"""Schemas for roadmap polling and regeneration."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

GenerationStatus = Literal["pending", "generating_phases", "completed", "failed"]


class PhaseSummary(BaseModel):
    id: UUID
    phase_id: str
    phase_number: int
    title: str
    description: str
    duration_weeks: int
    start_date: date
    end_date: date
    skills_to_learn: List[str] = Field(default_factory=list)
    learning_objectives: List[str] = Field(default_factory=list)
    key_concepts: List[str] = Field(default_factory=list)
    resources: List[Any] = Field(default_factory=list)
    task_count: int = 0
    has_tasks: bool = False


class RoadmapSummary(BaseModel):
    id: UUID
    generation_status: GenerationStatus
    model_identifier: Optional[str]
    error_message: Optional[str]
    phase_count: int


class RoadmapResponse(BaseModel):
    id: UUID
    goal_id: UUID
    generation_status: GenerationStatus
    error_message: Optional[str]
    model_identifier: Optional[str]
    generated_plan: Dict[str, Any]
    milestones: List[Dict[str, Any]]
    phases: List[PhaseSummary]
    created_at: datetime
    updated_at: datetime


class RoadmapEnvelope(BaseModel):
    roadmap: RoadmapResponse
    request_id: str


class RoadmapRegenerateRequest(BaseModel):
    user_id: UUID
