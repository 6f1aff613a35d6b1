"""Roadmap generation: the template path and the two-stage model path.

``create_plan`` runs in the request. A template hit is scheduled and stored as
``completed`` straight away. A miss stores a ``pending`` roadmap, runs the
overview call, moves the roadmap to ``generating_phases`` and hands
``complete_roadmap_stages`` to the dispatcher. That continuation runs without
the request, in its own session, and always ends by writing ``completed`` or
``failed`` to the roadmap.
"""
from __future__ import annotations

import logging
from datetime import date
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings
from app.core.errors import (
    GENERATION_FAILURES,
    GenerationInProgressError,
    InvalidStatusTransition,
    ResponseParseError,
)
from app.db.models.goal import Goal
from app.db.models.phase import Phase
from app.db.models.roadmap import (
    IN_FLIGHT_STATUSES,
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_GENERATING_PHASES,
    STATUS_PENDING,
    TERMINAL_STATUSES,
    Roadmap,
)
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.phase_scheduler import PhaseSpec, ScheduledPhase, schedule_phases
from app.services.plan_schemas import OverviewPayload, StagesPayload, validate_payload
from app.services.prompts import (
    ROADMAP_SYSTEM_PROMPT,
    STAGES_SYSTEM_PROMPT,
    build_overview_prompt,
    build_stages_prompt,
)
from app.services.resilient_invoker import invoke_with_retry
from app.services.response_repair import repair_json_object
from app.services.template_catalog import Template
from app.services.template_matcher import match_template
from app.services.template_personalizer import PersonalizedTemplate, personalize_template

logger = logging.getLogger(__name__)

Dispatcher = Callable[..., Any]

ALLOWED_TRANSITIONS: Dict[str, frozenset] = {
    STATUS_PENDING: frozenset({STATUS_GENERATING_PHASES, STATUS_FAILED}),
    STATUS_GENERATING_PHASES: frozenset({STATUS_COMPLETED, STATUS_FAILED}),
    STATUS_COMPLETED: frozenset(),
    STATUS_FAILED: frozenset(),
}

ERROR_MESSAGE_LIMIT = 1000


def transition_status(roadmap: Roadmap, target: str, *, error_message: Optional[str] = None) -> None:
    """Move ``roadmap`` along the generation lifecycle or raise ``InvalidStatusTransition``."""
    current = roadmap.generation_status or STATUS_PENDING
    if target not in ALLOWED_TRANSITIONS.get(current, frozenset()):
        raise InvalidStatusTransition(current, target)
    roadmap.generation_status = target
    if target == STATUS_FAILED:
        roadmap.error_message = (error_message or "generation failed")[:ERROR_MESSAGE_LIMIT]
    else:
        roadmap.error_message = None


def get_roadmap_for_goal(db: Session, goal_id: UUID) -> Optional[Roadmap]:
    return db.query(Roadmap).filter(Roadmap.goal_id == goal_id).one_or_none()


def create_plan(
    db: Session,
    goal: Goal,
    *,
    model_client,
    dispatch: Dispatcher,
    session_factory: sessionmaker,
) -> Roadmap:
    """Return the goal's roadmap, creating it when the goal has none yet."""
    existing = get_roadmap_for_goal(db, goal.id)
    if existing is not None:
        logger.info("Goal %s already has roadmap %s (%s)", goal.id, existing.id, existing.generation_status)
        return existing

    template = match_template(goal.title)
    metadata = {"goal_id": str(goal.id), "path": "template" if template else "model"}
    with trace("plan.create", metadata=metadata, user_id=str(goal.user_id)):
        if template is not None:
            return _create_from_template(db, goal, template)
        return _start_model_generation(
            db,
            goal,
            model_client=model_client,
            dispatch=dispatch,
            session_factory=session_factory,
        )


def regenerate_plan(
    db: Session,
    goal: Goal,
    *,
    model_client,
    dispatch: Dispatcher,
    session_factory: sessionmaker,
) -> Roadmap:
    """Discard a finished roadmap (and its phases and tasks) and generate a new one."""
    existing = get_roadmap_for_goal(db, goal.id)
    if existing is not None:
        if existing.generation_status in IN_FLIGHT_STATUSES:
            raise GenerationInProgressError(f"Roadmap for goal {goal.id} is still {existing.generation_status}")
        logger.info("Regenerating roadmap %s for goal %s", existing.id, goal.id)
        db.delete(existing)
        db.flush()
        db.expire(goal, ["roadmap"])
        log_metric("plan.regenerate", 1, {"previous_status": existing.generation_status})
    return create_plan(db, goal, model_client=model_client, dispatch=dispatch, session_factory=session_factory)


def _create_from_template(db: Session, goal: Goal, template: Template) -> Roadmap:
    personalized = personalize_template(
        template,
        current_level=goal.current_level,
        daily_time_commitment=goal.daily_time_commitment,
        target_date=goal.target_date,
        start_date=goal.start_date,
    )
    adjusted = personalized.template
    specs = [
        PhaseSpec(
            title=blueprint.title,
            duration_weeks=blueprint.weeks,
            description=blueprint.description,
            skills_to_learn=blueprint.skills_to_learn,
            learning_objectives=blueprint.learning_objectives,
            key_concepts=blueprint.key_concepts,
            resources=blueprint.resources,
        )
        for blueprint in adjusted.phases
    ]
    scheduled = schedule_phases(specs, goal.start_date)

    roadmap = Roadmap(
        goal_id=goal.id,
        generated_plan=_template_plan(personalized, scheduled),
        milestones=_template_milestones(adjusted, scheduled),
        model_identifier=f"template:{template.id}",
        generation_status=STATUS_COMPLETED,
    )
    db.add(roadmap)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        return _existing_after_race(db, goal, exc)
    _add_phase_rows(db, roadmap, scheduled)
    db.commit()
    db.refresh(roadmap)

    log_metric("plan.template.hit", 1, {"template_id": template.id})
    logger.info("Roadmap %s created from template %s for goal %s", roadmap.id, template.id, goal.id)
    return roadmap


def _start_model_generation(
    db: Session,
    goal: Goal,
    *,
    model_client,
    dispatch: Dispatcher,
    session_factory: sessionmaker,
) -> Roadmap:
    roadmap = Roadmap(goal_id=goal.id, generated_plan={}, milestones=[], generation_status=STATUS_PENDING)
    db.add(roadmap)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        return _existing_after_race(db, goal, exc)
    db.refresh(roadmap)
    roadmap_id = roadmap.id

    try:
        with trace("plan.overview", metadata={"roadmap_id": str(roadmap_id)}, user_id=str(goal.user_id)):
            overview = _generate_overview(model_client, goal)
    except Exception as exc:
        _log_stage_failure("overview", roadmap_id, exc)
        mark_roadmap_failed(db, roadmap_id, exc)
        raise

    plan = dict(roadmap.generated_plan or {})
    plan.update(overview.model_dump(mode="json"))
    roadmap.generated_plan = plan
    roadmap.milestones = _normalize_milestones(overview.milestones)
    roadmap.model_identifier = settings.overview_model
    transition_status(roadmap, STATUS_GENERATING_PHASES)
    db.commit()
    logger.info("Roadmap %s overview stored; dispatching stage generation", roadmap_id)

    try:
        dispatch(complete_roadmap_stages, session_factory, roadmap_id, model_client)
    except Exception as exc:
        logger.exception("Unable to dispatch stage generation for roadmap %s", roadmap_id)
        mark_roadmap_failed(db, roadmap_id, exc)
        raise

    db.refresh(roadmap)
    return roadmap


def complete_roadmap_stages(session_factory: sessionmaker, roadmap_id: UUID, model_client) -> None:
    """Background continuation: generate stages and finish the roadmap.

    Never raises. Success writes phases and ``completed``; any failure writes
    ``failed`` with the error text.
    """
    db: Session = session_factory()
    try:
        roadmap = db.get(Roadmap, roadmap_id)
        if roadmap is None:
            logger.warning("Roadmap %s vanished before stage generation", roadmap_id)
            return
        if roadmap.generation_status != STATUS_GENERATING_PHASES:
            logger.info("Roadmap %s is %s; skipping stage generation", roadmap_id, roadmap.generation_status)
            return

        goal = roadmap.goal
        overview = dict(roadmap.generated_plan or {})
        with trace("plan.stages", metadata={"roadmap_id": str(roadmap_id)}, user_id=str(goal.user_id)):
            stages = _generate_stages(model_client, goal, overview)
            scheduled = schedule_phases(stages.phases, goal.start_date)

        # The stage call can take a while; the sweep may have failed the roadmap meanwhile.
        db.refresh(roadmap)
        if roadmap.generation_status != STATUS_GENERATING_PHASES:
            logger.info("Roadmap %s moved to %s during stage generation", roadmap_id, roadmap.generation_status)
            return

        plan = dict(roadmap.generated_plan or {})
        plan["phases"] = [_phase_dict(phase) for phase in scheduled]
        plan["total_weeks_scheduled"] = sum(phase.duration_weeks for phase in scheduled)
        roadmap.generated_plan = plan
        if not roadmap.milestones:
            roadmap.milestones = _derived_milestones(scheduled)
        roadmap.model_identifier = f"{settings.overview_model}+{settings.stages_model}"
        _add_phase_rows(db, roadmap, scheduled)
        transition_status(roadmap, STATUS_COMPLETED)
        db.commit()
        log_metric("plan.stages.completed", len(scheduled), {"roadmap_id": str(roadmap_id)})
        logger.info("Roadmap %s completed with %s phases", roadmap_id, len(scheduled))
    except Exception as exc:
        db.rollback()
        _log_stage_failure("stages", roadmap_id, exc)
        try:
            mark_roadmap_failed(db, roadmap_id, exc)
        except Exception:
            logger.exception("Unable to record failure for roadmap %s", roadmap_id)
    finally:
        db.close()


def mark_roadmap_failed(db: Session, roadmap_id: UUID, error: BaseException | str) -> bool:
    """Write ``failed`` if the roadmap is still in flight; returns whether it did."""
    db.rollback()
    roadmap = db.get(Roadmap, roadmap_id)
    if roadmap is None or roadmap.generation_status in TERMINAL_STATUSES:
        return False
    transition_status(roadmap, STATUS_FAILED, error_message=_error_text(error))
    db.commit()
    return True


def _generate_overview(model_client, goal: Goal) -> OverviewPayload:
    prompt = build_overview_prompt(goal)
    raw = invoke_with_retry(
        partial(
            model_client.complete,
            ROADMAP_SYSTEM_PROMPT,
            prompt,
            max_tokens=settings.overview_max_tokens,
            timeout=settings.roadmap_timeout_seconds,
            model=settings.overview_model,
        ),
        attempts=settings.model_retry_attempts,
        base_delay=settings.roadmap_retry_base_delay_ms / 1000,
        operation="plan.overview",
    )
    return validate_payload(OverviewPayload, repair_json_object(raw), stage="overview")


def _generate_stages(model_client, goal: Goal, overview: Dict[str, Any]) -> StagesPayload:
    prompt = build_stages_prompt(goal, overview)
    raw = invoke_with_retry(
        partial(
            model_client.complete,
            STAGES_SYSTEM_PROMPT,
            prompt,
            max_tokens=settings.stages_max_tokens,
            timeout=settings.roadmap_timeout_seconds,
            model=settings.stages_model,
        ),
        attempts=settings.model_retry_attempts,
        base_delay=settings.roadmap_retry_base_delay_ms / 1000,
        operation="plan.stages",
    )
    return validate_payload(StagesPayload, repair_json_object(raw), stage="stages")


def _add_phase_rows(db: Session, roadmap: Roadmap, scheduled: Sequence[ScheduledPhase]) -> None:
    for phase in scheduled:
        db.add(
            Phase(
                roadmap_id=roadmap.id,
                phase_id=phase.phase_id,
                phase_number=phase.phase_number,
                title=phase.title,
                description=phase.description,
                duration_weeks=phase.duration_weeks,
                start_date=phase.start_date,
                end_date=phase.end_date,
                skills_to_learn=list(phase.skills_to_learn),
                learning_objectives=list(phase.learning_objectives),
                key_concepts=list(phase.key_concepts),
                resources=list(phase.resources),
            )
        )


def _existing_after_race(db: Session, goal: Goal, error: IntegrityError) -> Roadmap:
    existing = get_roadmap_for_goal(db, goal.id)
    if existing is None:
        raise error
    logger.info("Roadmap for goal %s created concurrently; returning %s", goal.id, existing.id)
    return existing


def _template_plan(personalized: PersonalizedTemplate, scheduled: Sequence[ScheduledPhase]) -> Dict[str, Any]:
    template = personalized.template
    return {
        "template_id": template.id,
        "title": template.title,
        "overview": template.overview,
        "approach": template.approach,
        "total_hours_required": personalized.total_hours,
        "total_weeks_required": personalized.total_weeks,
        "stage_count": len(scheduled),
        "time_multiplier": personalized.time_multiplier,
        "estimated_completion_date": _iso(personalized.projected_end_date),
        "fits_target_date": personalized.fits_target_date,
        "difficulty_factors": list(template.difficulty_factors),
        "prerequisites": list(template.prerequisites),
        "success_metrics": list(template.success_metrics),
        "common_challenges": list(template.common_challenges),
        "phases": [
            dict(_phase_dict(phase), daily_activities=list(blueprint.daily_activities))
            for phase, blueprint in zip(scheduled, template.phases)
        ],
    }


def _template_milestones(template: Template, scheduled: Sequence[ScheduledPhase]) -> List[Dict[str, Any]]:
    milestones: List[Dict[str, Any]] = []
    for phase, blueprint in zip(scheduled, template.phases):
        titles = blueprint.milestones or (f"Complete {phase.title}",)
        for title in titles:
            milestones.append(
                {
                    "id": f"milestone-{len(milestones) + 1}",
                    "title": title,
                    "phase_number": phase.phase_number,
                    "target_date": phase.end_date.isoformat(),
                }
            )
    return milestones


def _derived_milestones(scheduled: Sequence[ScheduledPhase]) -> List[Dict[str, Any]]:
    return [
        {
            "id": f"milestone-{phase.phase_number}",
            "title": f"Complete {phase.title}",
            "phase_number": phase.phase_number,
            "target_date": phase.end_date.isoformat(),
        }
        for phase in scheduled
    ]


def _normalize_milestones(raw: Sequence[Any]) -> List[Dict[str, Any]]:
    milestones: List[Dict[str, Any]] = []
    for index, item in enumerate(raw or [], start=1):
        if isinstance(item, dict):
            entry = dict(item)
            entry.setdefault("id", f"milestone-{index}")
            entry.setdefault("title", f"Milestone {index}")
        elif isinstance(item, str) and item.strip():
            entry = {"id": f"milestone-{index}", "title": item.strip()}
        else:
            continue
        milestones.append(entry)
    return milestones


def _phase_dict(phase: ScheduledPhase) -> Dict[str, Any]:
    return {
        "id": phase.phase_id,
        "phase_number": phase.phase_number,
        "title": phase.title,
        "description": phase.description,
        "duration_weeks": phase.duration_weeks,
        "start_date": phase.start_date.isoformat(),
        "end_date": phase.end_date.isoformat(),
        "skills_to_learn": list(phase.skills_to_learn),
        "learning_objectives": list(phase.learning_objectives),
        "key_concepts": list(phase.key_concepts),
        "resources": list(phase.resources),
    }


def _log_stage_failure(stage: str, roadmap_id: UUID, exc: BaseException) -> None:
    log_metric("plan.generation.failed", 1, {"stage": stage, "error_type": type(exc).__name__})
    if isinstance(exc, ResponseParseError):
        logger.warning("Roadmap %s %s response unparseable: %s (preview=%r)", roadmap_id, stage, exc, exc.preview)
    elif isinstance(exc, GENERATION_FAILURES):
        logger.warning("Roadmap %s %s generation failed: %s", roadmap_id, stage, exc)
    else:
        logger.exception("Roadmap %s %s generation crashed", roadmap_id, stage)


def _error_text(error: BaseException | str) -> str:
    if isinstance(error, str):
        return error
    message = str(error) or type(error).__name__
    return f"{type(error).__name__}: {message}"


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None
