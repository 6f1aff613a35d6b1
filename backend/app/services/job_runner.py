"""Batch jobs run by the scheduler worker."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.db.models.phase import TASKS_GENERATING, TASKS_NONE, Phase
from app.db.models.roadmap import IN_FLIGHT_STATUSES, STATUS_FAILED, Roadmap
from app.observability.metrics import log_metric
from app.services.roadmap_generator import transition_status

logger = logging.getLogger(__name__)

STALE_GENERATION_MESSAGE = "generation timed out"


@dataclass
class SweepResult:
    roadmaps_failed: int
    phases_released: int
    roadmap_ids: List[UUID] = field(default_factory=list)


def sweep_stale_generations(
    db: Session,
    older_than_minutes: int,
    *,
    now: Optional[datetime] = None,
) -> SweepResult:
    """Fail roadmaps and release phase claims that stopped making progress.

    A roadmap left in ``pending`` or ``generating_phases`` past the threshold
    (for example because the worker died mid-continuation) is marked
    ``failed`` so readers stop waiting. Nothing is retried; the user can
    regenerate.
    """
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(minutes=older_than_minutes)

    stale_roadmaps = (
        db.query(Roadmap)
        .filter(Roadmap.generation_status.in_(IN_FLIGHT_STATUSES), Roadmap.updated_at < cutoff)
        .all()
    )
    failed_ids: List[UUID] = []
    for roadmap in stale_roadmaps:
        previous = roadmap.generation_status
        transition_status(roadmap, STATUS_FAILED, error_message=STALE_GENERATION_MESSAGE)
        failed_ids.append(roadmap.id)
        logger.warning("Roadmap %s stuck in %s since %s; marked failed", roadmap.id, previous, roadmap.updated_at)

    stuck_phases = (
        db.query(Phase)
        .filter(Phase.tasks_status == TASKS_GENERATING, Phase.updated_at < cutoff)
        .all()
    )
    for phase in stuck_phases:
        phase.tasks_status = TASKS_NONE
        logger.warning("Released stale task generation claim on phase %s", phase.id)

    db.commit()

    result = SweepResult(
        roadmaps_failed=len(failed_ids),
        phases_released=len(stuck_phases),
        roadmap_ids=failed_ids,
    )
    if result.roadmaps_failed or result.phases_released:
        log_metric("sweep.roadmaps_failed", result.roadmaps_failed)
        log_metric("sweep.phases_released", result.phases_released)
    return result
