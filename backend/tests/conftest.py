from __future__ import annotations

import json
from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.errors import ModelCallError
from app.db.base import Base
from app.db import models  # noqa: F401  ensure models are loaded
from app.db.models.goal import Goal
from app.db.models.user import User

WEEKDAYS_MWF = {
    "sunday": False,
    "monday": True,
    "tuesday": False,
    "wednesday": True,
    "thursday": False,
    "friday": True,
    "saturday": False,
}


def make_session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover - sqlite setup
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture()
def session_factory() -> sessionmaker:
    return make_session_factory()


@pytest.fixture(autouse=True)
def no_retry_delay(monkeypatch):
    monkeypatch.setattr(settings, "roadmap_retry_base_delay_ms", 0)
    monkeypatch.setattr(settings, "tasks_retry_base_delay_ms", 0)


class FakeModelClient:
    """Scripted stand-in for ModelClient.

    Each entry in ``responses`` is returned (strings, dicts as JSON) or raised
    (exceptions) on successive ``complete`` calls.
    """

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def complete(self, system_prompt: str, user_prompt: str, **kwargs: Any) -> str:
        self.calls.append({"system_prompt": system_prompt, "user_prompt": user_prompt, **kwargs})
        if not self.responses:
            raise ModelCallError("no scripted response left", retryable=False)
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, dict):
            return json.dumps(item)
        return item


class CapturingDispatcher:
    """Records background submissions instead of running them."""

    def __init__(self):
        self.jobs: List[tuple] = []

    def __call__(self, func, *args):
        self.jobs.append((func, args))

    def run_all(self) -> None:
        jobs, self.jobs = self.jobs, []
        for func, args in jobs:
            func(*args)


def seed_goal(
    session_factory: sessionmaker,
    *,
    title: str = "Master competitive chess openings",
    user_id: Optional[UUID] = None,
    start_date: date = date(2024, 1, 15),
    target_date: Optional[date] = None,
    daily_time_commitment: int = 45,
    current_level: str = "beginner",
    weekly_schedule: Optional[Dict[str, bool]] = None,
) -> UUID:
    session = session_factory()
    try:
        user_id = user_id or uuid4()
        if session.get(User, user_id) is None:
            session.add(User(id=user_id))
        goal = Goal(
            user_id=user_id,
            title=title,
            current_level=current_level,
            daily_time_commitment=daily_time_commitment,
            start_date=start_date,
            target_date=target_date,
            weekly_schedule=weekly_schedule or dict(WEEKDAYS_MWF),
        )
        session.add(goal)
        session.commit()
        return goal.id
    finally:
        session.close()


def overview_response(stage_count: int = 3) -> Dict[str, Any]:
    return {
        "overview": "A structured path through chess openings",
        "total_hours_required": 60,
        "total_weeks_required": 6,
        "stage_count": stage_count,
        "estimated_completion_date": "2024-02-25",
        "roadmap_phases": [],
        "milestones": [{"id": "milestone-1", "title": "Know three openings", "stage_number": 3}],
    }


def stages_response(weeks: List[int]) -> Dict[str, Any]:
    return {
        "phases": [
            {
                "id": f"stage-{index}",
                "title": f"Opening block {index}",
                "description": "Study and drill a family of openings",
                "duration_weeks": duration,
                "skills_to_learn": ["Move orders"],
                "learning_objectives": ["Play the first ten moves from memory"],
                "key_concepts": ["Development"],
                "resources": ["Lichess studies"],
            }
            for index, duration in enumerate(weeks, start=1)
        ]
    }
