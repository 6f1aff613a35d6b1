"""Prompt builders for the three model calls: overview, stages and phase tasks."""
from __future__ import annotations

import json
import math
from typing import Any, Dict, Mapping, Optional, Sequence

from app.services.task_allocator import available_day_names

ROADMAP_SYSTEM_PROMPT = (
    "You are an expert personal development coach and educational curriculum designer. "
    "Your task is to create a high-level learning roadmap overview with milestones and phases. "
    "Always respond with a single valid JSON object that matches the expected schema."
)

STAGES_SYSTEM_PROMPT = (
    "You are an expert personal development coach and educational curriculum designer. "
    "Your task is to create detailed, actionable learning stages based on the roadmap overview. "
    "Always respond with a single valid JSON object that matches the expected schema."
)

TASKS_SYSTEM_PROMPT = (
    "You are an expert learning designer and task planner. "
    "Break a specific learning phase into concrete, daily actionable tasks. "
    'Prefer "Complete lessons 1-3 on family vocabulary" over "Practice vocabulary". '
    "Always respond with a single valid JSON object that matches the expected schema."
)

DEFAULT_BASE_HOURS = 200
MIN_STAGES = 6
MAX_STAGES = 12


def estimate_base_hours(goal_title: str) -> int:
    title = goal_title.lower()
    if "spanish" in title or "language" in title:
        if "fluent" in title:
            return 700
        if "conversational" in title:
            return 200
        return 180
    return DEFAULT_BASE_HOURS


def plan_timeline(goal_title: str, daily_minutes: int, weekly_schedule: Mapping[str, Any]) -> Dict[str, Any]:
    """Hours, weeks and stage count the overview prompt asks the model to honour."""
    available_days = max(1, len(available_day_names(weekly_schedule)))
    hours_per_week = round(daily_minutes * available_days / 60, 1) or 0.1
    base_hours = estimate_base_hours(goal_title)
    total_weeks = max(1, round(base_hours / hours_per_week))
    stage_count = max(MIN_STAGES, min(MAX_STAGES, math.ceil(total_weeks / 6)))
    return {
        "hours_per_week": hours_per_week,
        "base_hours": base_hours,
        "total_weeks": total_weeks,
        "stage_count": stage_count,
    }


def build_overview_prompt(goal) -> str:
    days = ", ".join(available_day_names(goal.weekly_schedule)) or "none selected"
    timeline = plan_timeline(goal.title, goal.daily_time_commitment, goal.weekly_schedule)
    target_line = f"Target Date: {goal.target_date.isoformat()}\n" if goal.target_date else ""
    description_line = f"Details: {goal.description}\n" if goal.description else ""
    return (
        "Create a high-level learning roadmap overview for this goal:\n\n"
        f"Goal: {goal.title}\n"
        f"{description_line}"
        f"Current Level: {goal.current_level}\n"
        f"Time Commitment: {goal.daily_time_commitment} minutes/day ({timeline['hours_per_week']} hours/week)\n"
        f"Available Days: {days}\n"
        f"Start Date: {goal.start_date.isoformat()}\n"
        f"{target_line}\n"
        "Calculate a realistic timeline:\n"
        f"- Total hours needed: ~{timeline['base_hours']} hours\n"
        f"- Total weeks: {timeline['total_weeks']} weeks\n"
        f"- Number of stages planned: {timeline['stage_count']}\n\n"
        "Return JSON with this shape:\n"
        "{\n"
        '  "overview": "High-level description of the complete learning journey",\n'
        f'  "total_hours_required": {timeline["base_hours"]},\n'
        f'  "total_weeks_required": {timeline["total_weeks"]},\n'
        f'  "stage_count": {timeline["stage_count"]},\n'
        '  "estimated_completion_date": "YYYY-MM-DD",\n'
        '  "roadmap_phases": [{"id": "roadmap-1", "name": "Foundation Phase", "description": "...", '
        '"duration_percentage": 25, "key_activities": [], "specific_goals": []}],\n'
        '  "milestones": [{"id": "milestone-1", "title": "Foundation Complete", "description": "...", '
        '"target_date": "YYYY-MM-DD", "stage_number": 3}]\n'
        "}"
    )


def build_stages_prompt(goal, overview: Dict[str, Any]) -> str:
    total_weeks = _positive_number(overview.get("total_weeks_required"), 12)
    stage_count = _positive_number(overview.get("stage_count"), MIN_STAGES)
    average_weeks = max(1, round(total_weeks / stage_count))
    return (
        f"Create {stage_count} detailed learning stages for this goal:\n\n"
        f"Goal: {goal.title}\n"
        f"Current Level: {goal.current_level}\n"
        f"Total Timeline: {total_weeks} weeks\n"
        f"Number of Stages: {stage_count}\n\n"
        "Based on this roadmap overview:\n"
        f"{json.dumps(overview, indent=2, default=str)}\n\n"
        "Requirements:\n"
        f"- Create exactly {stage_count} specific, actionable stages\n"
        f"- Each stage should be about {average_weeks} weeks (adjust as needed)\n"
        f"- Total duration must equal {total_weeks} weeks\n"
        "- Name exact topics, not abstract themes\n\n"
        "Return JSON with this shape:\n"
        "{\n"
        '  "phases": [\n'
        '    {"id": "stage-1", "title": "Specific stage title", "description": "3-5 sentences", '
        f'"duration_weeks": {average_weeks}, "skills_to_learn": [], "learning_objectives": [], '
        '"key_concepts": [], "resources": []}\n'
        "  ]\n"
        "}"
    )


def build_tasks_prompt(
    *,
    goal_title: str,
    phase_title: str,
    phase_description: str,
    phase_number: int,
    duration_weeks: int,
    daily_minutes: int,
    weekly_schedule: Mapping[str, Any],
    skills_to_learn: Optional[Sequence[str]] = None,
    learning_objectives: Optional[Sequence[str]] = None,
    key_concepts: Optional[Sequence[str]] = None,
) -> str:
    days = available_day_names(weekly_schedule)
    return (
        f"Break stage {phase_number} of the goal \"{goal_title}\" into daily tasks.\n\n"
        f"Stage: {phase_title}\n"
        f"Description: {phase_description or 'n/a'}\n"
        f"Duration: {duration_weeks} weeks\n"
        f"Skills: {', '.join(skills_to_learn or []) or 'n/a'}\n"
        f"Objectives: {', '.join(learning_objectives or []) or 'n/a'}\n"
        f"Key concepts: {', '.join(key_concepts or []) or 'n/a'}\n"
        f"Daily time: {daily_minutes} minutes\n"
        f"Available days ({len(days)} per week): {', '.join(days) or 'none'}\n\n"
        "Group tasks into patterns that repeat weekly and grow harder from one pattern to the next. "
        f"Pattern weeks should add up to {duration_weeks}. "
        "Task types: study, practice, exercise, review.\n\n"
        "Return JSON with this shape:\n"
        "{\n"
        '  "task_patterns": [\n'
        '    {"pattern_name": "Foundation Pattern (Weeks 1-2)", "weeks_duration": 2, "weekly_tasks": [\n'
        f'      {{"title": "...", "description": "...", "estimated_minutes": {daily_minutes}, "type": "study"}}\n'
        "    ]}\n"
        "  ]\n"
        "}"
    )


def _positive_number(value: Any, default: int) -> int:
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default
