"""In-process background execution for fire-and-forget continuations.

A lazily started APScheduler ``BackgroundScheduler`` runs each submitted call
once, right away, on its thread pool. The submitting request never waits for
the result; continuations record their own outcome in the database.
"""
from __future__ import annotations

import atexit
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from uuid import uuid4

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler

from app.core.config import settings
from app.core.context import bind_request_id, get_request_id

logger = logging.getLogger(__name__)

_scheduler: Optional[BackgroundScheduler] = None
_lock = threading.Lock()


def get_scheduler() -> BackgroundScheduler:
    global _scheduler
    with _lock:
        if _scheduler is None:
            scheduler = BackgroundScheduler(
                executors={"default": ThreadPoolExecutor(max_workers=settings.background_workers)},
                job_defaults={"coalesce": False, "max_instances": settings.background_workers},
                timezone=settings.scheduler_timezone,
            )
            scheduler.start()
            atexit.register(_shutdown_scheduler)
            logger.info("Background scheduler started (workers=%s)", settings.background_workers)
            _scheduler = scheduler
        return _scheduler


def submit_background(func: Callable[..., Any], *args: Any) -> str:
    """Queue ``func(*args)`` to run immediately in the background; returns the job id."""
    job_id = f"{getattr(func, '__name__', 'job')}-{uuid4()}"
    get_scheduler().add_job(
        _run_job,
        trigger="date",
        run_date=datetime.now(timezone.utc),
        args=(func, args, get_request_id()),
        id=job_id,
        misfire_grace_time=None,
    )
    logger.debug("Submitted background job %s", job_id)
    return job_id


def _run_job(func: Callable[..., Any], args: tuple, request_id: Optional[str]) -> None:
    with bind_request_id(request_id):
        try:
            func(*args)
        except Exception:
            logger.exception("Background job %s failed", getattr(func, "__name__", func))


def _shutdown_scheduler() -> None:  # pragma: no cover - process exit
    global _scheduler
    with _lock:
        if _scheduler is not None and _scheduler.running:
            _scheduler.shutdown(wait=False)
        _scheduler = None
