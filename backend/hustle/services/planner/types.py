"""Value types shared by the goal planner."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional, Tuple

Priority = Literal["low", "medium", "high"]


@dataclass(frozen=True)
class GoalInput:
    """Immutable planning request; dates are ISO calendar dates."""

    id: str
    title: str
    created_at_iso: str
    deadline_iso: str
    description: Optional[str] = None
    category: Optional[str] = None
    target_value: Optional[float] = None
    unit: Optional[str] = None
    priority: Optional[Priority] = None

    @property
    def text(self) -> str:
        return f"{self.title} {self.description or ''} {self.category or ''}".lower()


@dataclass(frozen=True)
class StreakTaskSpec:
    """Recurring habit template, expanded once per day of the plan."""

    title: str
    description: str
    xp: int
    proof_required: bool


@dataclass(frozen=True)
class ScheduledTask:
    """One-off task due on a single calendar day."""

    goal_id: str
    title: str
    description: str
    xp: int
    date_iso: str
    proof_required: bool
    tags: Tuple[str, ...] = ()
    is_streak: bool = False


@dataclass(frozen=True)
class PlanResult:
    streaks: Tuple[StreakTaskSpec, ...]
    schedule: Tuple[ScheduledTask, ...]
    notes: Tuple[str, ...] = ()
    blueprint: str = "generic"


@dataclass(frozen=True)
class SeedResult:
    goal_id: str
    blueprint: str
    inserted_today: int
    inserted_streak: int
    streak_chunks: int
    notes: Tuple[str, ...] = field(default_factory=tuple)
