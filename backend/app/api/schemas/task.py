"""Schemas for phase tasks."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class TaskSummary(BaseModel):
    id: UUID
    roadmap_id: UUID
    phase_id: str
    phase_number: int
    title: str
    description: Optional[str]
    task_type: str
    scheduled_date: date
    estimated_duration: int
    priority: int
    completed: bool
    completed_at: Optional[datetime]


class PhaseTasksRequest(BaseModel):
    user_id: UUID


class PhaseTasksResponse(BaseModel):
    phase_id: UUID
    phase_key: str
    phase_number: int
    task_count: int
    tasks: List[TaskSummary]
    request_id: str


class TaskUpdateRequest(BaseModel):
    user_id: UUID
    completed: bool


class TaskUpdateResponse(BaseModel):
    id: UUID
    completed: bool
    completed_at: Optional[datetime]
    request_id: str
