from __future__ import annotations

import logging
from typing import Any, Dict, List

from app.core.context import bind_request_id, get_request_id
from app.worker import background


class _RecordingScheduler:
    def __init__(self):
        self.jobs: List[Dict[str, Any]] = []

    def add_job(self, func, **kwargs):
        self.jobs.append({"func": func, **kwargs})


def test_submit_background_queues_a_one_shot_job(monkeypatch) -> None:
    scheduler = _RecordingScheduler()
    monkeypatch.setattr(background, "get_scheduler", lambda: scheduler)

    def continuation(a, b):
        return a + b

    with bind_request_id("req-42"):
        job_id = background.submit_background(continuation, 1, 2)

    job = scheduler.jobs[0]
    assert job_id.startswith("continuation-")
    assert job["id"] == job_id
    assert job["trigger"] == "date"
    assert job["func"] is background._run_job
    assert job["args"] == (continuation, (1, 2), "req-42")


def test_run_job_binds_request_id() -> None:
    seen: List[str | None] = []

    background._run_job(lambda: seen.append(get_request_id()), (), "req-7")

    assert seen == ["req-7"]
    assert get_request_id() is None


def test_run_job_logs_and_contains_failures(caplog) -> None:
    def explode():
        raise RuntimeError("boom")

    with caplog.at_level(logging.ERROR, logger="app.worker.background"):
        background._run_job(explode, (), None)

    assert "explode" in caplog.text
