"""Task completion API routes."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.api.schemas.task import TaskSummary, TaskUpdateRequest, TaskUpdateResponse
from app.db.deps import get_db
from app.db.models.task import Task
from app.observability.metrics import log_metric
from app.observability.tracing import trace

router = APIRouter()


@router.patch("/tasks/{task_id}", response_model=TaskUpdateResponse, tags=["tasks"])
def update_task_completion(
    task_id: UUID,
    payload: TaskUpdateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> TaskUpdateResponse:
    """Mark a task complete or incomplete."""
    task = db.get(Task, task_id)
    if not task or task.user_id != payload.user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    request_id = getattr(http_request.state, "request_id", None)
    metadata: Dict[str, Any] = {
        "route": f"/tasks/{task_id}",
        "task_id": str(task_id),
        "user_id": str(payload.user_id),
        "completed": payload.completed,
        "request_id": request_id,
    }

    changed = False
    try:
        with trace(
            "task.complete",
            metadata=metadata,
            user_id=str(payload.user_id),
            request_id=request_id,
        ):
            if task.completed != payload.completed:
                changed = True
                task.completed = payload.completed
                task.completed_at = datetime.now(timezone.utc) if payload.completed else None
            db.add(task)
            db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(task)
    log_metric(
        "task.complete.changed",
        1 if changed else 0,
        metadata={"user_id": str(payload.user_id), "task_id": str(task_id)},
    )
    return TaskUpdateResponse(
        id=task.id,
        completed=bool(task.completed),
        completed_at=task.completed_at,
        request_id=request_id or "",
    )


def serialize_task(task: Task) -> TaskSummary:
    return TaskSummary(
        id=task.id,
        roadmap_id=task.roadmap_id,
        phase_id=task.phase_id,
        phase_number=task.phase_number,
        title=task.title,
        description=task.description,
        task_type=task.task_type,
        scheduled_date=task.scheduled_date,
        estimated_duration=task.estimated_duration,
        priority=task.priority,
        completed=bool(task.completed),
        completed_at=task.completed_at,
    )
