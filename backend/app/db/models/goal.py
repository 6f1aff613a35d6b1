"""Goal ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.db.types import JSONBCompat


class Goal(Base):
    __tablename__ = "goals"
    __table_args__ = (Index("ix_goals_user_id", "user_id"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    current_level = Column(Text, nullable=False, default="beginner")
    daily_time_commitment = Column(Integer, nullable=False, default=30)
    start_date = Column(Date, nullable=False)
    target_date = Column(Date, nullable=True)
    # {"sunday": bool, "monday": bool, ...}
    weekly_schedule = Column(JSONBCompat, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    user = relationship("User", back_populates="goals")
    roadmap = relationship(
        "Roadmap",
        back_populates="goal",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
