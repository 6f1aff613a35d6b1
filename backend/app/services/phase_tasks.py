"""On-demand task generation for a single phase."""
from __future__ import annotations

import logging
from functools import partial
from typing import Dict, List
from uuid import UUID

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotFoundError, TaskGenerationInProgressError
from app.db.models.goal import Goal
from app.db.models.phase import TASKS_GENERATED, TASKS_GENERATING, TASKS_NONE, Phase
from app.db.models.roadmap import Roadmap
from app.db.models.task import Task
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.plan_schemas import TaskPatternsPayload, validate_payload
from app.services.prompts import TASKS_SYSTEM_PROMPT, build_tasks_prompt
from app.services.resilient_invoker import invoke_with_retry
from app.services.response_repair import repair_json_object
from app.services.task_allocator import (
    TaskBlueprint,
    allocate_task_dates,
    enabled_weekdays,
    expand_task_patterns,
    fallback_task_pool,
    schedule_summary,
)
from app.services.task_priority import classify_priority

logger = logging.getLogger(__name__)


def get_owned_phase(db: Session, phase_row_id: UUID, user_id: UUID) -> Phase:
    phase = (
        db.query(Phase)
        .join(Roadmap, Phase.roadmap_id == Roadmap.id)
        .join(Goal, Roadmap.goal_id == Goal.id)
        .filter(Phase.id == phase_row_id, Goal.user_id == user_id)
        .one_or_none()
    )
    if phase is None:
        raise NotFoundError("Phase", phase_row_id)
    return phase


def list_phase_tasks(db: Session, phase: Phase) -> List[Task]:
    return (
        db.query(Task)
        .filter(Task.roadmap_id == phase.roadmap_id, Task.phase_id == phase.phase_id)
        .order_by(Task.scheduled_date.asc(), Task.created_at.asc())
        .all()
    )


def count_tasks_by_phase(db: Session, roadmap_id: UUID) -> Dict[str, int]:
    """Stable phase id -> number of tasks; phases without tasks are absent."""
    rows = (
        db.query(Task.phase_id, func.count(Task.id))
        .filter(Task.roadmap_id == roadmap_id)
        .group_by(Task.phase_id)
        .all()
    )
    return {phase_id: count for phase_id, count in rows}


def generate_tasks_for_phase(db: Session, phase_row_id: UUID, *, user_id: UUID, model_client) -> List[Task]:
    """Create the phase's dated tasks once and return them.

    The phase's ``tasks_status`` flag is claimed with a conditional UPDATE, so
    concurrent requests cannot both insert a task set. A request that loses
    the claim gets the existing tasks, or ``TaskGenerationInProgressError``
    while the winner is still working.
    """
    phase = get_owned_phase(db, phase_row_id, user_id)
    if not _claim_phase(db, phase.id):
        db.refresh(phase)
        if phase.tasks_status == TASKS_GENERATED:
            logger.info("Tasks for phase %s already generated", phase.id)
            return list_phase_tasks(db, phase)
        raise TaskGenerationInProgressError(f"Tasks for phase {phase.id} are being generated")

    roadmap = phase.roadmap
    goal = roadmap.goal
    metadata = {"phase_id": phase.phase_id, "phase_number": phase.phase_number, "roadmap_id": str(roadmap.id)}
    try:
        with trace("phase.tasks", metadata=metadata, user_id=str(user_id)):
            pool = _task_pool(model_client, goal, phase)
            allocations = allocate_task_dates(
                phase.start_date,
                phase.end_date,
                enabled_weekdays(goal.weekly_schedule),
                pool,
            )
            tasks = [
                Task(
                    user_id=goal.user_id,
                    roadmap_id=roadmap.id,
                    phase_id=phase.phase_id,
                    phase_number=phase.phase_number,
                    title=blueprint.title,
                    description=blueprint.description,
                    task_type=blueprint.task_type,
                    scheduled_date=scheduled_date,
                    estimated_duration=blueprint.estimated_minutes,
                    priority=classify_priority(blueprint.task_type),
                    completed=False,
                )
                for scheduled_date, blueprint in allocations
            ]
            db.add_all(tasks)
            phase.tasks_status = TASKS_GENERATED
            db.commit()
    except Exception:
        db.rollback()
        _release_phase(db, phase_row_id)
        raise

    summary = schedule_summary(allocations)
    log_metric("phase.tasks.count", summary["count"], dict(metadata, first=summary["first"], last=summary["last"]))
    logger.info("Generated %s tasks for phase %s (%s..%s)", summary["count"], phase.id, summary["first"], summary["last"])
    return list_phase_tasks(db, phase)


def _task_pool(model_client, goal: Goal, phase: Phase) -> List[TaskBlueprint]:
    prompt = build_tasks_prompt(
        goal_title=goal.title,
        phase_title=phase.title,
        phase_description=phase.description,
        phase_number=phase.phase_number,
        duration_weeks=phase.duration_weeks,
        daily_minutes=goal.daily_time_commitment,
        weekly_schedule=goal.weekly_schedule or {},
        skills_to_learn=phase.skills_to_learn,
        learning_objectives=phase.learning_objectives,
        key_concepts=phase.key_concepts,
    )
    raw = invoke_with_retry(
        partial(
            model_client.complete,
            TASKS_SYSTEM_PROMPT,
            prompt,
            max_tokens=settings.tasks_max_tokens,
            timeout=settings.tasks_timeout_seconds,
            model=settings.tasks_model,
        ),
        attempts=settings.model_retry_attempts,
        base_delay=settings.tasks_retry_base_delay_ms / 1000,
        operation="phase.tasks",
    )
    payload = validate_payload(TaskPatternsPayload, repair_json_object(raw), stage="tasks")
    pool = expand_task_patterns(payload, goal.daily_time_commitment)
    if not pool:
        logger.info("Model returned no task patterns for phase %s; using fallback pool", phase.id)
        log_metric("phase.tasks.fallback", 1, {"phase_id": phase.phase_id})
        pool = fallback_task_pool(goal.daily_time_commitment)
    return pool


def _claim_phase(db: Session, phase_row_id: UUID) -> bool:
    result = db.execute(
        update(Phase)
        .where(Phase.id == phase_row_id, Phase.tasks_status == TASKS_NONE)
        .values(tasks_status=TASKS_GENERATING)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount == 1


def _release_phase(db: Session, phase_row_id: UUID) -> None:
    try:
        db.execute(
            update(Phase)
            .where(Phase.id == phase_row_id, Phase.tasks_status == TASKS_GENERATING)
            .values(tasks_status=TASKS_NONE)
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Unable to release task generation claim on phase %s", phase_row_id)
