"""Goal intake and roadmap API routes."""
from __future__ import annotations

from time import perf_counter
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from app.api.deps import get_dispatcher, get_model_client
from app.api.errors import http_error_for
from app.api.schemas.goal import GoalCreateRequest, GoalCreateResponse, GoalDetailResponse, GoalResponse
from app.api.schemas.roadmap import (
    PhaseSummary,
    RoadmapEnvelope,
    RoadmapRegenerateRequest,
    RoadmapResponse,
    RoadmapSummary,
)
from app.core.errors import PathwiseError
from app.db.deps import get_db, get_session_factory
from app.db.models.goal import Goal
from app.db.models.phase import Phase
from app.db.models.roadmap import Roadmap
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.phase_tasks import count_tasks_by_phase
from app.services.roadmap_generator import Dispatcher, create_plan, get_roadmap_for_goal, regenerate_plan
from app.services.user_service import get_or_create_user, get_user_goal

router = APIRouter()


@router.post("/goals", response_model=GoalCreateResponse, status_code=status.HTTP_201_CREATED, tags=["goals"])
def create_goal_endpoint(
    payload: GoalCreateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
    model_client=Depends(get_model_client),
    dispatch: Dispatcher = Depends(get_dispatcher),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> GoalCreateResponse:
    """Store a goal and build its roadmap (instantly for templates, in the background otherwise)."""
    user_id = payload.user_id
    request_id = getattr(http_request.state, "request_id", None)
    base_metadata: Dict[str, Any] = {
        "route": "/goals",
        "user_id": str(user_id),
        "title_length": len(payload.title),
        "daily_time_commitment": payload.daily_time_commitment,
        "request_id": request_id,
    }

    start_time = perf_counter()
    success = False
    goal: Goal | None = None
    roadmap: Roadmap | None = None
    try:
        with trace("goal.create", metadata=base_metadata, user_id=str(user_id), request_id=request_id):
            get_or_create_user(db, user_id)
            goal = Goal(
                user_id=user_id,
                title=payload.title,
                description=payload.description,
                current_level=payload.current_level,
                daily_time_commitment=payload.daily_time_commitment,
                start_date=payload.start_date,
                target_date=payload.target_date,
                weekly_schedule=payload.weekly_schedule.model_dump(),
            )
            db.add(goal)
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Failed to save goal",
                ) from exc
            db.refresh(goal)

            roadmap = create_plan(
                db,
                goal,
                model_client=model_client,
                dispatch=dispatch,
                session_factory=session_factory,
            )
            success = True
    except HTTPException:
        db.rollback()
        raise
    except PathwiseError as exc:
        db.rollback()
        raise http_error_for(exc) from exc
    except Exception as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unexpected error while creating goal",
        ) from exc
    finally:
        metric_metadata = {"user_id": str(user_id)}
        if roadmap is not None:
            metric_metadata["generation_status"] = roadmap.generation_status
        log_metric("goal.create.success", 1 if success else 0, metadata=metric_metadata)
        log_metric("goal.create.latency_ms", (perf_counter() - start_time) * 1000, metadata=metric_metadata)

    return GoalCreateResponse(
        goal=serialize_goal(goal),
        roadmap=serialize_roadmap(db, roadmap),
        request_id=request_id or "",
    )


@router.get("/goals/{goal_id}", response_model=GoalDetailResponse, tags=["goals"])
def get_goal_endpoint(
    goal_id: UUID,
    http_request: Request,
    user_id: UUID = Query(..., description="User ID owning the goal"),
    db: Session = Depends(get_db),
) -> GoalDetailResponse:
    """Return a goal with a short summary of its roadmap."""
    request_id = getattr(http_request.state, "request_id", None)
    goal = _load_goal(db, goal_id, user_id)
    roadmap = get_roadmap_for_goal(db, goal.id)
    summary: Optional[RoadmapSummary] = None
    if roadmap is not None:
        summary = RoadmapSummary(
            id=roadmap.id,
            generation_status=roadmap.generation_status,
            model_identifier=roadmap.model_identifier,
            error_message=roadmap.error_message,
            phase_count=len(roadmap.phases),
        )
    return GoalDetailResponse(goal=serialize_goal(goal), roadmap=summary, request_id=request_id or "")


@router.get("/goals/{goal_id}/roadmap", response_model=RoadmapEnvelope, tags=["roadmaps"])
def get_roadmap_endpoint(
    goal_id: UUID,
    http_request: Request,
    user_id: UUID = Query(..., description="User ID owning the goal"),
    db: Session = Depends(get_db),
) -> RoadmapEnvelope:
    """Polling read: generation status, error and phases with task counts."""
    request_id = getattr(http_request.state, "request_id", None)
    goal = _load_goal(db, goal_id, user_id)
    with trace("roadmap.read", metadata={"goal_id": str(goal_id)}, user_id=str(user_id), request_id=request_id):
        roadmap = get_roadmap_for_goal(db, goal.id)
        if roadmap is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Roadmap not found")
        response = serialize_roadmap(db, roadmap)
    return RoadmapEnvelope(roadmap=response, request_id=request_id or "")


@router.post("/goals/{goal_id}/roadmap/regenerate", response_model=RoadmapEnvelope, tags=["roadmaps"])
def regenerate_roadmap_endpoint(
    goal_id: UUID,
    payload: RoadmapRegenerateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
    model_client=Depends(get_model_client),
    dispatch: Dispatcher = Depends(get_dispatcher),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> RoadmapEnvelope:
    """Replace a completed or failed roadmap with a freshly generated one."""
    request_id = getattr(http_request.state, "request_id", None)
    goal = _load_goal(db, goal_id, payload.user_id)
    success = False
    try:
        with trace(
            "roadmap.regenerate",
            metadata={"goal_id": str(goal_id), "request_id": request_id},
            user_id=str(payload.user_id),
            request_id=request_id,
        ):
            roadmap = regenerate_plan(
                db,
                goal,
                model_client=model_client,
                dispatch=dispatch,
                session_factory=session_factory,
            )
            success = True
    except PathwiseError as exc:
        db.rollback()
        raise http_error_for(exc) from exc
    except Exception as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unexpected error while regenerating roadmap",
        ) from exc
    finally:
        log_metric("roadmap.regenerate.success", 1 if success else 0, metadata={"goal_id": str(goal_id)})

    return RoadmapEnvelope(roadmap=serialize_roadmap(db, roadmap), request_id=request_id or "")


def _load_goal(db: Session, goal_id: UUID, user_id: UUID) -> Goal:
    try:
        return get_user_goal(db, goal_id, user_id)
    except PathwiseError as exc:
        raise http_error_for(exc) from exc


def serialize_goal(goal: Goal) -> GoalResponse:
    return GoalResponse(
        id=goal.id,
        user_id=goal.user_id,
        title=goal.title,
        description=goal.description,
        current_level=goal.current_level,
        daily_time_commitment=goal.daily_time_commitment,
        start_date=goal.start_date,
        target_date=goal.target_date,
        weekly_schedule={key: bool(value) for key, value in (goal.weekly_schedule or {}).items()},
        created_at=goal.created_at,
    )


def serialize_roadmap(db: Session, roadmap: Roadmap) -> RoadmapResponse:
    counts = count_tasks_by_phase(db, roadmap.id)
    phases = db.query(Phase).filter(Phase.roadmap_id == roadmap.id).order_by(Phase.phase_number.asc()).all()
    return RoadmapResponse(
        id=roadmap.id,
        goal_id=roadmap.goal_id,
        generation_status=roadmap.generation_status,
        error_message=roadmap.error_message,
        model_identifier=roadmap.model_identifier,
        generated_plan=roadmap.generated_plan or {},
        milestones=roadmap.milestones or [],
        phases=[_serialize_phase(phase, counts.get(phase.phase_id, 0)) for phase in phases],
        created_at=roadmap.created_at,
        updated_at=roadmap.updated_at,
    )


def _serialize_phase(phase: Phase, task_count: int) -> PhaseSummary:
    return PhaseSummary(
        id=phase.id,
        phase_id=phase.phase_id,
        phase_number=phase.phase_number,
        title=phase.title,
        description=phase.description or "",
        duration_weeks=phase.duration_weeks,
        start_date=phase.start_date,
        end_date=phase.end_date,
        skills_to_learn=list(phase.skills_to_learn or []),
        learning_objectives=list(phase.learning_objectives or []),
        key_concepts=list(phase.key_concepts or []),
        resources=list(phase.resources or []),
        task_count=task_count,
        has_tasks=task_count > 0,
    )
