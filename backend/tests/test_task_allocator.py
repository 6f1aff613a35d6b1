from __future__ import annotations

from datetime import date

import pytest

from app.core.errors import SchedulingInvariantViolation
from app.services.plan_schemas import TaskPatternsPayload
from app.services.task_allocator import (
    FALLBACK_TASK_POOL,
    TaskBlueprint,
    allocate_task_dates,
    enabled_weekdays,
    expand_task_patterns,
    weekday_number,
)
from app.services.task_priority import classify_priority

A = TaskBlueprint("A", "first", "study", 30)
B = TaskBlueprint("B", "second", "review", 30)


def test_mon_wed_fri_week_cycles_pool() -> None:
    allocations = allocate_task_dates(date(2024, 1, 15), date(2024, 1, 21), frozenset({1, 3, 5}), [A, B])

    assert allocations == [
        (date(2024, 1, 15), A),
        (date(2024, 1, 17), B),
        (date(2024, 1, 19), A),
    ]


def test_every_task_lands_inside_range_on_enabled_day() -> None:
    start, end = date(2024, 2, 26), date(2024, 4, 7)
    weekdays = frozenset({0, 2, 6})
    allocations = allocate_task_dates(start, end, weekdays, list(FALLBACK_TASK_POOL))

    assert allocations
    for scheduled, _ in allocations:
        assert start <= scheduled <= end
        assert weekday_number(scheduled) in weekdays


def test_allocation_is_deterministic() -> None:
    args = (date(2024, 1, 1), date(2024, 3, 31), frozenset({1, 2, 4}), list(FALLBACK_TASK_POOL))
    assert allocate_task_dates(*args) == allocate_task_dates(*args)


def test_no_available_days_yields_no_tasks() -> None:
    assert allocate_task_dates(date(2024, 1, 15), date(2024, 1, 28), frozenset(), [A]) == []


def test_empty_pool_is_rejected() -> None:
    with pytest.raises(SchedulingInvariantViolation):
        allocate_task_dates(date(2024, 1, 15), date(2024, 1, 28), frozenset({1}), [])


def test_weekday_numbering_starts_on_sunday() -> None:
    assert weekday_number(date(2024, 1, 14)) == 0  # Sunday
    assert weekday_number(date(2024, 1, 15)) == 1  # Monday
    assert weekday_number(date(2024, 1, 20)) == 6  # Saturday


def test_enabled_weekdays_from_schedule() -> None:
    schedule = {"Sunday": True, "monday": True, "tuesday": False, "friday": True, "funday": True}
    assert enabled_weekdays(schedule) == frozenset({0, 1, 5})
    assert enabled_weekdays({}) == frozenset()
    assert enabled_weekdays(None) == frozenset()


def test_patterns_repeat_for_their_week_count() -> None:
    payload = TaskPatternsPayload.model_validate(
        {
            "task_patterns": [
                {
                    "pattern_name": "Foundation",
                    "weeks_duration": 2,
                    "weekly_tasks": [
                        {"title": "Read", "description": "Chapter", "type": "Study", "estimated_minutes": 20},
                        {"title": "Drill", "type": "practice"},
                    ],
                },
                {"pattern_name": "Review", "weekly_tasks": [{"title": "Recap", "type": "review"}]},
            ]
        }
    )

    pool = expand_task_patterns(payload, default_minutes=45)

    assert [bp.title for bp in pool] == ["Read", "Drill", "Read", "Drill", "Recap"]
    assert pool[0].task_type == "study"
    assert pool[0].estimated_minutes == 20
    assert pool[1].estimated_minutes == 45


def test_flat_task_list_is_one_week_pattern() -> None:
    payload = TaskPatternsPayload.model_validate({"tasks": [{"title": "Scales", "minutes": 15, "type": "practice"}]})
    pool = expand_task_patterns(payload, default_minutes=30)
    assert pool == [TaskBlueprint("Scales", "Practice and refine your skills", "practice", 15)]


def test_empty_patterns_expand_to_nothing() -> None:
    assert expand_task_patterns(TaskPatternsPayload.model_validate({}), default_minutes=30) == []


def test_fallback_pool_order() -> None:
    assert [bp.task_type for bp in FALLBACK_TASK_POOL] == ["practice", "study", "exercise", "practice", "review"]


@pytest.mark.parametrize(
    ("task_type", "expected"),
    [("study", 5), ("practice", 4), ("exercise", 3), ("review", 2), ("project", 3), ("", 3), (None, 3), ("Study", 5)],
)
def test_priority_table(task_type, expected) -> None:
    assert classify_priority(task_type) == expected
