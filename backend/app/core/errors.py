"""Error taxonomy for the plan generation pipeline.

Services raise these; the HTTP layer maps them onto status codes and the
background continuation records them on the roadmap row instead of raising.
"""
from __future__ import annotations


class PathwiseError(Exception):
    """Base class for every pipeline error."""


class ModelCallError(PathwiseError):
    """The generation model failed or timed out.

    ``retryable`` is False for faults a retry cannot fix, such as a missing
    API key.
    """

    def __init__(self, message: str, *, retryable: bool = True) -> None:
        super().__init__(message)
        self.retryable = retryable


class ResponseParseError(PathwiseError):
    """Model text could not be coerced into a JSON object, even after repair."""

    def __init__(self, message: str, *, preview: str = "") -> None:
        super().__init__(message)
        self.preview = preview


class IncompleteResponseError(PathwiseError):
    """JSON parsed but failed semantic validation (e.g. fewer than 3 phases)."""


class NotFoundError(PathwiseError):
    """A goal, roadmap, phase or task is missing or belongs to another user."""

    def __init__(self, entity: str, entity_id: object) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class SchedulingInvariantViolation(PathwiseError):
    """Scheduling was attempted with input that valid callers never produce."""


class InvalidStatusTransition(PathwiseError):
    """A roadmap status write would break the generation lifecycle."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move roadmap from {current!r} to {target!r}")
        self.current = current
        self.target = target


class GenerationInProgressError(PathwiseError):
    """The goal's roadmap is still being generated."""


class TaskGenerationInProgressError(PathwiseError):
    """Another request is generating tasks for the same phase."""


# Failures that mark a roadmap as failed when they escape a model stage.
GENERATION_FAILURES = (ModelCallError, ResponseParseError, IncompleteResponseError)
