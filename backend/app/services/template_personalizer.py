"""Adjust a catalog template to the user's level and daily time budget."""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import date, timedelta
from typing import Optional

from app.services.template_catalog import Template

SLOW_CADENCE_MINUTES = 30
FAST_CADENCE_MINUTES = 60
SLOW_MULTIPLIER = 1.5
FAST_MULTIPLIER = 0.8

BEGINNER_REPLACEMENTS = (("Master", "Learn the fundamentals of"),)
INTERMEDIATE_REPLACEMENTS = (("from complete beginner", "building on your existing knowledge"),)


@dataclass(frozen=True)
class PersonalizedTemplate:
    template: Template
    time_multiplier: float
    total_hours: int
    total_weeks: int
    projected_end_date: Optional[date] = None
    fits_target_date: Optional[bool] = None


def time_multiplier(daily_time_commitment: int) -> float:
    """Fewer minutes per day stretches the plan; more compresses it."""
    if daily_time_commitment < SLOW_CADENCE_MINUTES:
        return SLOW_MULTIPLIER
    if daily_time_commitment > FAST_CADENCE_MINUTES:
        return FAST_MULTIPLIER
    return 1.0


def level_phrasing(text: str, current_level: str | None) -> str:
    level = (current_level or "").lower()
    replacements = ()
    if "beginner" in level:
        replacements = BEGINNER_REPLACEMENTS
    elif "intermediate" in level:
        replacements = INTERMEDIATE_REPLACEMENTS
    for old, new in replacements:
        text = text.replace(old, new)
    return text


def personalize_template(
    template: Template,
    *,
    current_level: str | None,
    daily_time_commitment: int,
    target_date: date | None = None,
    start_date: date | None = None,
) -> PersonalizedTemplate:
    """Return a scaled copy of ``template``; the catalog entry is left untouched.

    When both ``start_date`` and ``target_date`` are known the result records
    whether the scaled plan finishes on or before the target.
    """
    multiplier = time_multiplier(daily_time_commitment)
    phases = tuple(
        replace(phase, weeks=max(1, math.ceil(phase.weeks * multiplier))) for phase in template.phases
    )
    total_hours = round(template.total_estimated_hours * multiplier)
    adjusted = replace(
        template,
        overview=level_phrasing(template.overview, current_level),
        total_estimated_hours=total_hours,
        phases=phases,
    )

    projected_end: Optional[date] = None
    fits: Optional[bool] = None
    if start_date is not None:
        projected_end = start_date + timedelta(days=adjusted.total_weeks * 7 - 1)
        if target_date is not None:
            fits = projected_end <= target_date

    return PersonalizedTemplate(
        template=adjusted,
        time_multiplier=multiplier,
        total_hours=total_hours,
        total_weeks=adjusted.total_weeks,
        projected_end_date=projected_end,
        fits_target_date=fits,
    )
