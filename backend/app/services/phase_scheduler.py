"""Lay phases end to end on the calendar."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional, Sequence, Set, Tuple

from app.core.errors import SchedulingInvariantViolation


@dataclass(frozen=True)
class PhaseSpec:
    title: str
    duration_weeks: int
    id: Optional[str] = None
    description: str = ""
    skills_to_learn: Tuple[str, ...] = ()
    learning_objectives: Tuple[str, ...] = ()
    key_concepts: Tuple[str, ...] = ()
    resources: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ScheduledPhase:
    phase_number: int
    phase_id: str
    title: str
    description: str
    duration_weeks: int
    start_date: date
    end_date: date
    skills_to_learn: Tuple[str, ...] = field(default=())
    learning_objectives: Tuple[str, ...] = field(default=())
    key_concepts: Tuple[str, ...] = field(default=())
    resources: Tuple[str, ...] = field(default=())


def schedule_phases(phases: Sequence[PhaseSpec], anchor: date) -> List[ScheduledPhase]:
    """Contiguous, non-overlapping date ranges starting at ``anchor``.

    Phase ``n`` spans ``duration_weeks * 7`` days and the next phase starts the
    day after it ends. Phase ids are unique within the result: a missing or
    repeated id becomes ``phase-<n>``.
    """
    if not phases:
        raise SchedulingInvariantViolation("Cannot schedule an empty phase list")

    scheduled: List[ScheduledPhase] = []
    seen_ids: Set[str] = set()
    start = anchor
    for index, phase in enumerate(phases):
        weeks = phase.duration_weeks
        if not isinstance(weeks, int) or weeks < 1:
            raise SchedulingInvariantViolation(f"Phase {index + 1} has invalid duration {weeks!r}")
        end = start + timedelta(days=weeks * 7 - 1)
        number = index + 1
        phase_id = _unique_phase_id(phase.id, number, seen_ids)
        scheduled.append(
            ScheduledPhase(
                phase_number=number,
                phase_id=phase_id,
                title=phase.title,
                description=phase.description or "",
                duration_weeks=weeks,
                start_date=start,
                end_date=end,
                skills_to_learn=tuple(phase.skills_to_learn),
                learning_objectives=tuple(phase.learning_objectives),
                key_concepts=tuple(phase.key_concepts),
                resources=tuple(phase.resources),
            )
        )
        start = end + timedelta(days=1)
    return scheduled


def _unique_phase_id(candidate: Optional[str], number: int, seen: Set[str]) -> str:
    phase_id = candidate if candidate and candidate not in seen else f"phase-{number}"
    suffix = 2
    base = phase_id
    while phase_id in seen:
        phase_id = f"{base}-{suffix}"
        suffix += 1
    seen.add(phase_id)
    return phase_id
