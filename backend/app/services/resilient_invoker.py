"""Bounded retries with linear backoff around model calls."""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

from app.core.errors import ModelCallError
from app.observability.metrics import log_metric

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3


def invoke_with_retry(
    call: Callable[[], T],
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    base_delay: float = 0.5,
    operation: str = "model.call",
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """Run ``call`` up to ``attempts`` times, sleeping ``n * base_delay`` after failure ``n``.

    Only retryable ``ModelCallError`` triggers another attempt. Anything else,
    including input validation errors, propagates on first occurrence. When
    every attempt fails the last error is raised.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")
    sleep = sleep or time.sleep

    attempt = 1
    while True:
        try:
            return call()
        except ModelCallError as exc:
            if not exc.retryable or attempt == attempts:
                log_metric("model.failure", 1, {"operation": operation})
                logger.error("%s failed after %s attempt(s): %s", operation, attempt, exc)
                raise
            delay = attempt * base_delay
            logger.warning(
                "%s attempt %s/%s failed: %s; retrying in %.2fs",
                operation,
                attempt,
                attempts,
                exc,
                delay,
            )
            log_metric("model.retry", 1, {"operation": operation, "attempt": attempt})
            sleep(delay)
        attempt += 1
