"""Pydantic schemas for the JSON objects the generation model returns."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from app.core.errors import IncompleteResponseError

MIN_PHASES = 3
MAX_PHASES = 24


def _coerce_text_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, list):
        return [str(value)]
    items: List[str] = []
    for item in value:
        if isinstance(item, str):
            if item.strip():
                items.append(item)
        elif isinstance(item, dict):
            label = item.get("title") or item.get("name") or item.get("description")
            items.append(str(label) if label else json.dumps(item, sort_keys=True))
        elif item is not None:
            items.append(str(item))
    return items


def _coerce_positive_int(value: Any, default: int = 1) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return default
    return max(1, number)


class OverviewPayload(BaseModel):
    """First-stage output: the overview plus how many stages to expect."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    overview: str = Field(..., min_length=1)
    stage_count: int = Field(
        ...,
        ge=MIN_PHASES,
        le=MAX_PHASES,
        validation_alias=AliasChoices("stage_count", "phases_count"),
    )
    total_hours_required: Optional[float] = None
    total_weeks_required: Optional[float] = None
    estimated_completion_date: Optional[str] = None
    roadmap_phases: List[Any] = Field(default_factory=list)
    milestones: List[Any] = Field(default_factory=list)


class StagePayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    title: str = Field(..., min_length=1)
    description: str = ""
    duration_weeks: int = 1
    skills_to_learn: List[str] = Field(default_factory=list)
    learning_objectives: List[str] = Field(default_factory=list)
    key_concepts: List[str] = Field(default_factory=list)
    resources: List[str] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("description", mode="before")
    @classmethod
    def _default_description(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("duration_weeks", mode="before")
    @classmethod
    def _coerce_weeks(cls, value: Any) -> int:
        return _coerce_positive_int(value)

    @field_validator("skills_to_learn", "learning_objectives", "key_concepts", "resources", mode="before")
    @classmethod
    def _coerce_lists(cls, value: Any) -> List[str]:
        return _coerce_text_list(value)


class StagesPayload(BaseModel):
    """Second-stage output: the full phase list."""

    model_config = ConfigDict(extra="allow")

    phases: List[StagePayload] = Field(..., min_length=MIN_PHASES)


class TaskDraft(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: str = "Practice skills"
    description: str = "Practice and refine your skills"
    type: str = "practice"
    estimated_minutes: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("estimated_minutes", "minutes"),
    )

    @field_validator("title", "description", "type", mode="before")
    @classmethod
    def _blank_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("estimated_minutes", mode="before")
    @classmethod
    def _coerce_minutes(cls, value: Any) -> Optional[int]:
        if value in (None, "", 0):
            return None
        return _coerce_positive_int(value)


class TaskPattern(BaseModel):
    model_config = ConfigDict(extra="ignore")

    pattern_name: str = ""
    weeks_duration: int = 1
    weekly_tasks: List[TaskDraft] = Field(default_factory=list)

    @field_validator("weeks_duration", mode="before")
    @classmethod
    def _coerce_weeks(cls, value: Any) -> int:
        return _coerce_positive_int(value)


class TaskPatternsPayload(BaseModel):
    """Task-generation output.

    Accepts the pattern shape (``task_patterns``) and the flat ``tasks`` list,
    which is treated as a single one-week pattern.
    """

    model_config = ConfigDict(extra="ignore")

    task_patterns: List[TaskPattern] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_flat_tasks(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("task_patterns") and isinstance(data.get("tasks"), list):
            return {"task_patterns": [{"pattern_name": "tasks", "weeks_duration": 1, "weekly_tasks": data["tasks"]}]}
        return data


PayloadT = TypeVar("PayloadT", bound=BaseModel)


def validate_payload(model: Type[PayloadT], data: Dict[str, Any], *, stage: str) -> PayloadT:
    """Validate repaired model JSON, mapping failures to ``IncompleteResponseError``."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}" for error in exc.errors()
        )
        raise IncompleteResponseError(f"{stage} response failed validation: {problems}") from exc
