"""Roadmap ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.db.types import JSONBCompat

STATUS_PENDING = "pending"
STATUS_GENERATING_PHASES = "generating_phases"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"

IN_FLIGHT_STATUSES = (STATUS_PENDING, STATUS_GENERATING_PHASES)
TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_FAILED)


class Roadmap(Base):
    __tablename__ = "roadmaps"
    # One roadmap per goal; regeneration replaces the row.
    __table_args__ = (UniqueConstraint("goal_id", name="uq_roadmaps_goal_id"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    goal_id = Column(UUID(as_uuid=True), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False)
    generated_plan = Column(JSONBCompat, nullable=False, default=dict)
    milestones = Column(JSONBCompat, nullable=False, default=list)
    model_identifier = Column(Text, nullable=True)
    generation_status = Column(String(length=32), nullable=False, server_default=sa_text("'pending'"))
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    goal = relationship("Goal", back_populates="roadmap")
    phases = relationship(
        "Phase",
        back_populates="roadmap",
        order_by="Phase.phase_number",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    tasks = relationship("Task", back_populates="roadmap", cascade="all, delete-orphan", passive_deletes=True)
