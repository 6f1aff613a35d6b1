"""Place task blueprints on the calendar days a user is available."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from app.core.errors import SchedulingInvariantViolation
from app.services.plan_schemas import TaskPatternsPayload

# Index is the weekday number used across the pipeline: Sunday=0 ... Saturday=6.
WEEKDAY_NAMES: Tuple[str, ...] = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)


@dataclass(frozen=True)
class TaskBlueprint:
    title: str
    description: str
    task_type: str
    estimated_minutes: int


def weekday_number(day: date) -> int:
    """Sunday=0 numbering; ``date.weekday()`` starts the week on Monday."""
    return (day.weekday() + 1) % 7


def enabled_weekdays(weekly_schedule: Optional[Mapping[str, Any]]) -> FrozenSet[int]:
    if not weekly_schedule:
        return frozenset()
    enabled = set()
    for name, available in weekly_schedule.items():
        key = str(name).strip().lower()
        if available and key in WEEKDAY_NAMES:
            enabled.add(WEEKDAY_NAMES.index(key))
    return frozenset(enabled)


def available_day_names(weekly_schedule: Optional[Mapping[str, Any]]) -> List[str]:
    days = enabled_weekdays(weekly_schedule)
    return [WEEKDAY_NAMES[number] for number in sorted(days)]


def fallback_task_pool(default_minutes: int) -> List[TaskBlueprint]:
    return [
        TaskBlueprint("Practice vocabulary", "Study and practice new words and phrases", "practice", default_minutes),
        TaskBlueprint("Study concepts", "Learn and understand key concepts", "study", default_minutes),
        TaskBlueprint("Apply knowledge", "Apply what you have learned in practical exercises", "exercise", default_minutes),
        TaskBlueprint("Practice skills", "Practice and refine your skills", "practice", default_minutes),
        TaskBlueprint("Review progress", "Review previous lessons and practice materials", "review", default_minutes),
    ]


FALLBACK_TASK_POOL: Tuple[TaskBlueprint, ...] = tuple(fallback_task_pool(30))


def expand_task_patterns(payload: TaskPatternsPayload, default_minutes: int) -> List[TaskBlueprint]:
    """Repeat every pattern's weekly tasks once per week of its duration."""
    pool: List[TaskBlueprint] = []
    for pattern in payload.task_patterns:
        for _ in range(pattern.weeks_duration):
            for draft in pattern.weekly_tasks:
                pool.append(
                    TaskBlueprint(
                        title=draft.title,
                        description=draft.description,
                        task_type=draft.type.strip().lower(),
                        estimated_minutes=draft.estimated_minutes or default_minutes,
                    )
                )
    return pool


def allocate_task_dates(
    start: date,
    end: date,
    weekdays: FrozenSet[int] | set[int],
    pool: Sequence[TaskBlueprint],
) -> List[Tuple[date, TaskBlueprint]]:
    """Assign ``pool[k % len(pool)]`` to the k-th available day in ``[start, end]``.

    Dates are plain calendar dates, so no timezone can shift a task onto a
    neighbouring day. No available weekdays means no tasks.
    """
    if not weekdays:
        return []
    if not pool:
        raise SchedulingInvariantViolation("Cannot allocate tasks from an empty blueprint pool")
    if end < start:
        raise SchedulingInvariantViolation(f"Phase ends ({end}) before it starts ({start})")

    allocations: List[Tuple[date, TaskBlueprint]] = []
    current = start
    while current <= end:
        if weekday_number(current) in weekdays:
            allocations.append((current, pool[len(allocations) % len(pool)]))
        current += timedelta(days=1)
    return allocations


def schedule_summary(allocations: Sequence[Tuple[date, TaskBlueprint]]) -> Dict[str, Any]:
    if not allocations:
        return {"count": 0, "first": None, "last": None}
    return {
        "count": len(allocations),
        "first": allocations[0][0].isoformat(),
        "last": allocations[-1][0].isoformat(),
    }
