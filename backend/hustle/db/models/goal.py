"""Goal ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, Date, DateTime, Float, Index, String, Text, func

from hustle.db.base import Base
from hustle.db.types import JSONBCompat


def _new_goal_id() -> str:
    return str(uuid4())


class Goal(Base):
    __tablename__ = "goals"
    __table_args__ = (Index("ix_goals_user_id", "user_id"),)

    # Owner and goal ids are opaque strings handed over by the identity layer.
    id = Column(String(64), primary_key=True, default=_new_goal_id)
    user_id = Column(String(128), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)
    start_date = Column(Date, nullable=False)
    deadline = Column(Date, nullable=False)
    target_value = Column(Float, nullable=True)
    unit = Column(String(50), nullable=True)
    priority = Column(String(20), nullable=True)
    # Column named "metadata" but attribute renamed to avoid Base.metadata collisions.
    metadata_json = Column("metadata", JSONBCompat, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
