"""Dedicated APScheduler worker process."""
from __future__ import annotations

import logging
import signal
import threading

from apscheduler.schedulers.background import BackgroundScheduler

from app.core.config import settings
from app.core.logging import configure_logging
from app.db.session import SessionLocal
from app.observability.client import init_opik
from app.services.job_runner import sweep_stale_generations


logger = logging.getLogger(__name__)


def main() -> None:
    configure_logging(log_level=settings.log_level)
    init_opik()
    logger.info("Scheduler worker starting (enabled=%s)", settings.scheduler_enabled)

    scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)

    if settings.scheduler_enabled:
        _register_jobs(scheduler)
        scheduler.start()
        _run_sweep_job()
    else:
        logger.warning("Scheduler disabled via config; worker will idle")

    stop_event = threading.Event()

    def shutdown(signum, frame):  # pragma: no cover - signal handler
        logger.info("Scheduler worker shutting down (signal=%s)", signum)
        if scheduler.running:
            scheduler.shutdown(wait=False)
        stop_event.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        stop_event.wait()
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        shutdown(signal.SIGINT, None)


def _register_jobs(scheduler: BackgroundScheduler) -> None:
    scheduler.add_job(
        _run_sweep_job,
        trigger="interval",
        minutes=settings.sweep_interval_minutes,
        id="stale_generation_sweep",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    logger.info(
        "Registered stale generation sweep (every %s min, threshold %s min)",
        settings.sweep_interval_minutes,
        settings.stale_generation_minutes,
    )


def _run_sweep_job() -> None:
    session = SessionLocal()
    try:
        result = sweep_stale_generations(session, settings.stale_generation_minutes)
        logger.info(
            "Stale generation sweep complete: roadmaps_failed=%s, phases_released=%s",
            result.roadmaps_failed,
            result.phases_released,
        )
    except Exception:  # pragma: no cover - logged and retried on the next interval
        session.rollback()
        logger.exception("Stale generation sweep failed")
    finally:
        session.close()


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
