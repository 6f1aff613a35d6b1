from __future__ import annotations

from datetime import date, timedelta

import pytest

from app.core.errors import SchedulingInvariantViolation
from app.services.phase_scheduler import PhaseSpec, schedule_phases


def test_two_phases_from_monday_anchor() -> None:
    phases = schedule_phases(
        [PhaseSpec(title="One", duration_weeks=2), PhaseSpec(title="Two", duration_weeks=3)],
        date(2024, 1, 15),
    )

    assert [(p.start_date, p.end_date) for p in phases] == [
        (date(2024, 1, 15), date(2024, 1, 28)),
        (date(2024, 1, 29), date(2024, 2, 18)),
    ]
    assert [p.phase_number for p in phases] == [1, 2]
    assert [p.phase_id for p in phases] == ["phase-1", "phase-2"]


def test_phases_partition_time_without_gaps() -> None:
    anchor = date(2023, 12, 27)
    durations = [1, 4, 2, 7, 1, 3]
    phases = schedule_phases([PhaseSpec(title=f"P{n}", duration_weeks=d) for n, d in enumerate(durations)], anchor)

    assert phases[0].start_date == anchor
    for current, following in zip(phases, phases[1:]):
        assert current.end_date + timedelta(days=1) == following.start_date
    for phase, weeks in zip(phases, durations):
        assert (phase.end_date - phase.start_date).days + 1 == weeks * 7


def test_provided_ids_are_kept() -> None:
    phases = schedule_phases(
        [PhaseSpec(title="A", duration_weeks=1, id="stage-a"), PhaseSpec(title="B", duration_weeks=1)],
        date(2024, 3, 1),
    )
    assert [p.phase_id for p in phases] == ["stage-a", "phase-2"]


def test_repeated_ids_fall_back_to_phase_number() -> None:
    phases = schedule_phases(
        [PhaseSpec(title=t, duration_weeks=1, id="stage") for t in ("A", "B", "C")],
        date(2024, 3, 1),
    )

    assert [p.phase_id for p in phases] == ["stage", "phase-2", "phase-3"]


def test_fallback_id_taken_by_model_id_gets_suffix() -> None:
    phases = schedule_phases(
        [PhaseSpec(title="A", duration_weeks=1, id="phase-2"), PhaseSpec(title="B", duration_weeks=1)],
        date(2024, 3, 1),
    )

    assert [p.phase_id for p in phases] == ["phase-2", "phase-2-2"]


def test_empty_phase_list_is_rejected() -> None:
    with pytest.raises(SchedulingInvariantViolation):
        schedule_phases([], date(2024, 1, 1))


def test_non_positive_duration_is_rejected() -> None:
    with pytest.raises(SchedulingInvariantViolation):
        schedule_phases([PhaseSpec(title="A", duration_weeks=0)], date(2024, 1, 1))
