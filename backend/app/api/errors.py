"""Translate pipeline errors into HTTP responses."""
from __future__ import annotations

import logging

from fastapi import HTTPException, status

from app.core.errors import (
    GenerationInProgressError,
    IncompleteResponseError,
    InvalidStatusTransition,
    ModelCallError,
    NotFoundError,
    PathwiseError,
    ResponseParseError,
    SchedulingInvariantViolation,
    TaskGenerationInProgressError,
)

logger = logging.getLogger(__name__)


def http_error_for(exc: PathwiseError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{exc.entity} not found")
    if isinstance(exc, GenerationInProgressError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Roadmap generation in progress")
    if isinstance(exc, TaskGenerationInProgressError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Task generation in progress")
    if isinstance(exc, ModelCallError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Generation model unavailable")
    if isinstance(exc, ResponseParseError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Generation model returned unreadable output")
    if isinstance(exc, IncompleteResponseError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Generation model returned an incomplete plan")
    if isinstance(exc, (SchedulingInvariantViolation, InvalidStatusTransition)):
        logger.error("Internal pipeline error: %s", exc)
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Scheduling failed")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unexpected pipeline error")
