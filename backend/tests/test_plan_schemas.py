from __future__ import annotations

import pytest

from app.core.errors import IncompleteResponseError
from app.services.plan_schemas import OverviewPayload, StagesPayload, TaskDraft, validate_payload


def test_two_phases_is_an_incomplete_plan() -> None:
    data = {"phases": [{"title": "One", "duration_weeks": 2}, {"title": "Two", "duration_weeks": 2}]}
    with pytest.raises(IncompleteResponseError, match="phases"):
        validate_payload(StagesPayload, data, stage="stages")


def test_missing_phases_is_an_incomplete_plan() -> None:
    with pytest.raises(IncompleteResponseError):
        validate_payload(StagesPayload, {"overview": "no phases"}, stage="stages")


def test_stage_fields_are_coerced() -> None:
    payload = validate_payload(
        StagesPayload,
        {
            "phases": [
                {"id": 1, "title": "A", "duration_weeks": "3", "skills_to_learn": "Listening"},
                {"title": "B", "duration_weeks": 0, "resources": [{"title": "Book"}, None, "  "]},
                {"title": "C", "duration_weeks": None, "description": None},
            ]
        },
        stage="stages",
    )

    first, second, third = payload.phases
    assert first.id == "1"
    assert first.duration_weeks == 3
    assert first.skills_to_learn == ["Listening"]
    assert second.duration_weeks == 1
    assert second.resources == ["Book"]
    assert third.duration_weeks == 1
    assert third.description == ""


def test_stage_without_title_is_incomplete() -> None:
    data = {"phases": [{"title": "A"}, {"title": "B"}, {"description": "no title"}]}
    with pytest.raises(IncompleteResponseError):
        validate_payload(StagesPayload, data, stage="stages")


def test_overview_accepts_phases_count_alias() -> None:
    payload = validate_payload(OverviewPayload, {"overview": "Plan", "phases_count": 8}, stage="overview")
    assert payload.stage_count == 8


@pytest.mark.parametrize("count", [2, 25])
def test_overview_stage_count_bounds(count: int) -> None:
    with pytest.raises(IncompleteResponseError):
        validate_payload(OverviewPayload, {"overview": "Plan", "stage_count": count}, stage="overview")


def test_overview_keeps_extra_fields() -> None:
    payload = validate_payload(
        OverviewPayload,
        {"overview": "Plan", "stage_count": 6, "learning_approach": "spaced repetition"},
        stage="overview",
    )
    assert payload.model_dump()["learning_approach"] == "spaced repetition"


def test_task_draft_blank_values_fall_back_to_defaults() -> None:
    draft = TaskDraft.model_validate({"title": "  ", "description": None, "type": "", "minutes": "25"})
    assert draft.title == "Practice skills"
    assert draft.description == "Practice and refine your skills"
    assert draft.type == "practice"
    assert draft.estimated_minutes == 25
