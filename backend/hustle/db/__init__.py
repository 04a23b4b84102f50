"""Persistence layer: ORM models plus the schema-tolerant task store."""

from hustle.db.base import Base
from hustle.db.models import Goal, Task

__all__ = ["Base", "Goal", "Task"]
