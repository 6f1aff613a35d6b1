"""Phase (a.k.a. stage) ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
    text as sa_text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.base import Base
from app.db.types import JSONBCompat

TASKS_NONE = "none"
TASKS_GENERATING = "generating"
TASKS_GENERATED = "generated"


class Phase(Base):
    __tablename__ = "phases"
    __table_args__ = (
        UniqueConstraint("roadmap_id", "phase_number", name="uq_phases_roadmap_number"),
        UniqueConstraint("roadmap_id", "phase_id", name="uq_phases_roadmap_phase_id"),
        Index("ix_phases_roadmap_id", "roadmap_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    roadmap_id = Column(UUID(as_uuid=True), ForeignKey("roadmaps.id", ondelete="CASCADE"), nullable=False)
    phase_id = Column(Text, nullable=False)
    phase_number = Column(Integer, nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    duration_weeks = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    skills_to_learn = Column(JSONBCompat, nullable=False, default=list)
    learning_objectives = Column(JSONBCompat, nullable=False, default=list)
    key_concepts = Column(JSONBCompat, nullable=False, default=list)
    resources = Column(JSONBCompat, nullable=False, default=list)
    # Compare-and-swap guard for task generation: none -> generating -> generated.
    tasks_status = Column(String(length=16), nullable=False, server_default=sa_text("'none'"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    roadmap = relationship("Roadmap", back_populates="phases")
