"""Helpers for working with users and the goals they own."""
from __future__ import annotations

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.db.models.goal import Goal
from app.db.models.user import User


def get_or_create_user(db: Session, user_id: UUID) -> User:
    """Fetch an existing user or insert one; a concurrent insert of the same id is tolerated."""
    user = db.get(User, user_id)
    if user:
        return user

    user = User(id=user_id)
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        existing = db.get(User, user_id)
        if existing is None:
            raise
        return existing
    return user


def get_user_goal(db: Session, goal_id: UUID, user_id: UUID) -> Goal:
    """Goals owned by someone else are reported as missing."""
    goal = db.get(Goal, goal_id)
    if goal is None or goal.user_id != user_id:
        raise NotFoundError("Goal", goal_id)
    return goal
