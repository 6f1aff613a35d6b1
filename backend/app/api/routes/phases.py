"""Phase task generation and listing routes."""
from __future__ import annotations

from time import perf_counter
from typing import Any, Dict, List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from app.api.deps import get_model_client
from app.api.errors import http_error_for
from app.api.routes.task import serialize_task
from app.api.schemas.task import PhaseTasksRequest, PhaseTasksResponse
from app.core.errors import PathwiseError
from app.db.deps import get_db
from app.db.models.phase import Phase
from app.db.models.task import Task
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.phase_tasks import generate_tasks_for_phase, get_owned_phase, list_phase_tasks

router = APIRouter()


@router.post("/phases/{phase_id}/tasks", response_model=PhaseTasksResponse, tags=["phases"])
def generate_phase_tasks_endpoint(
    phase_id: UUID,
    payload: PhaseTasksRequest,
    http_request: Request,
    db: Session = Depends(get_db),
    model_client=Depends(get_model_client),
) -> PhaseTasksResponse:
    """Generate the phase's dated tasks on first call; later calls return the same tasks."""
    request_id = getattr(http_request.state, "request_id", None)
    metadata: Dict[str, Any] = {
        "route": f"/phases/{phase_id}/tasks",
        "phase_id": str(phase_id),
        "user_id": str(payload.user_id),
        "request_id": request_id,
    }

    start_time = perf_counter()
    success = False
    tasks: List[Task] = []
    try:
        with trace("phase.tasks.request", metadata=metadata, user_id=str(payload.user_id), request_id=request_id):
            tasks = generate_tasks_for_phase(db, phase_id, user_id=payload.user_id, model_client=model_client)
            phase = get_owned_phase(db, phase_id, payload.user_id)
            success = True
    except PathwiseError as exc:
        db.rollback()
        raise http_error_for(exc) from exc
    except Exception as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unexpected error while generating tasks",
        ) from exc
    finally:
        metric_metadata = {"phase_id": str(phase_id), "user_id": str(payload.user_id)}
        log_metric("phase.tasks.success", 1 if success else 0, metadata=metric_metadata)
        log_metric("phase.tasks.latency_ms", (perf_counter() - start_time) * 1000, metadata=metric_metadata)

    return _phase_tasks_response(phase, tasks, request_id)


@router.get("/phases/{phase_id}/tasks", response_model=PhaseTasksResponse, tags=["phases"])
def list_phase_tasks_endpoint(
    phase_id: UUID,
    http_request: Request,
    user_id: UUID = Query(..., description="User ID owning the phase"),
    db: Session = Depends(get_db),
) -> PhaseTasksResponse:
    """List a phase's tasks in calendar order."""
    request_id = getattr(http_request.state, "request_id", None)
    try:
        phase = get_owned_phase(db, phase_id, user_id)
    except PathwiseError as exc:
        raise http_error_for(exc) from exc
    tasks = list_phase_tasks(db, phase)
    log_metric("phase.tasks.list.count", len(tasks), metadata={"phase_id": str(phase_id)})
    return _phase_tasks_response(phase, tasks, request_id)


def _phase_tasks_response(phase: Phase, tasks: List[Task], request_id: str | None) -> PhaseTasksResponse:
    return PhaseTasksResponse(
        phase_id=phase.id,
        phase_key=phase.phase_id,
        phase_number=phase.phase_number,
        task_count=len(tasks),
        tasks=[serialize_task(task) for task in tasks],
        request_id=request_id or "",
    )
