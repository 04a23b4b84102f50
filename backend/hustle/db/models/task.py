"""Task ORM model for the canonical deployment schema.

The planner never imports this model; it writes rows through
``hustle.db.task_store`` using whatever columns the detector finds.
"""
from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, Time, func, text as sa_text

from hustle.db.base import Base
from hustle.db.types import JSONBCompat


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_user_id", "user_id"),
        Index("ix_tasks_goal_id", "goal_id"),
        Index("ix_tasks_scheduled_for_date", "scheduled_for_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(128), nullable=False)
    goal_id = Column(String(64), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    xp_value = Column(Integer, nullable=False, server_default=sa_text("0"))
    scheduled_for_date = Column(Date, nullable=False)
    scheduled_time = Column(Time, nullable=True)
    type = Column(String(20), nullable=False, server_default=sa_text("'today'"))
    proof_required = Column(Boolean, nullable=False, server_default=sa_text("false"))
    tags = Column(JSONBCompat, nullable=True)
    priority = Column(String(20), nullable=True)
    load_score = Column(Integer, nullable=True)
    source = Column(String(50), nullable=True)
    completed = Column(Boolean, nullable=False, server_default=sa_text("false"))
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
