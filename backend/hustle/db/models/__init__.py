"""ORM models exposed for metadata discovery."""
from hustle.db.models.goal import Goal
from hustle.db.models.task import Task

__all__ = [
    "Goal",
    "Task",
]
