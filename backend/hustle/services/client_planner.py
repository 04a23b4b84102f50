"""Local fallback planner used when the blueprint planning path is unavailable.

Works purely in memory: classify the goal into a coarse category, pick one or
two streak habits, and fill each day with today-tasks under a hard budget of
three tasks and five load units (streak load included).
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Literal, Optional, Pattern, Tuple

from pydantic import BaseModel, Field, field_validator

from hustle.core.config import settings
from hustle.services.planner.date_range import each_day_iso_inclusive, to_local_date

ProofMode = Literal["flex", "realtime"]

MAX_TODAY_TASKS = 3
MAX_DAILY_LOAD = 5
MAX_STREAK_LOAD = 2
MAX_STREAK_HABITS = 2
STREAK_XP_PER_LOAD = 10
TODAY_XP_PER_LOAD = 15


class PlanTask(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    load_score: int = Field(..., ge=1, le=5, description="Effort weight, not XP.")
    proof_mode: ProofMode = "flex"


class DailyPlanEntry(BaseModel):
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    today_tasks: List[PlanTask] = Field(default_factory=list, max_length=MAX_TODAY_TASKS)


class ClientPlan(BaseModel):
    category: str = "general"
    streak_habits: List[PlanTask] = Field(..., min_length=1, max_length=MAX_STREAK_HABITS)
    daily_plan: List[DailyPlanEntry] = Field(..., min_length=1)

    @field_validator("streak_habits")
    @classmethod
    def streaks_stay_light(cls, habits: List[PlanTask]) -> List[PlanTask]:
        if any(habit.load_score > MAX_STREAK_LOAD for habit in habits):
            raise ValueError(f"streak habits must have load_score <= {MAX_STREAK_LOAD}")
        return habits

    @property
    def streak_load(self) -> int:
        return sum(habit.load_score for habit in self.streak_habits)


@dataclass(frozen=True)
class ClientTaskRow:
    goal_id: str
    title: str
    description: str
    type: Literal["today", "streak"]
    date_iso: str
    load_score: int
    proof_mode: ProofMode
    xp_value: int


CATEGORY_RULES: List[Tuple[Pattern[str], str]] = [
    (re.compile(r"\b(workout|gym|run|running|muscle|weight|fitness|exercise|strength|marathon|yoga)\b"), "fitness"),
    (re.compile(r"\b(learn|learning|study|course|exam|language|read|reading|code|coding|programming)\b"), "learning"),
    (re.compile(r"\b(business|money|income|startup|clients?|sales|marketing|revenue)\b"), "business"),
    (re.compile(r"\b(write|writing|paint|painting|draw|drawing|music|guitar|design|photo|video|art)\b"), "creative"),
]

STREAK_TEMPLATES: Dict[str, List[PlanTask]] = {
    "fitness": [
        PlanTask(title="Daily movement (20m)", description="Train or walk for 20 minutes.", load_score=2, proof_mode="realtime"),
        PlanTask(title="Hydration + protein log", description="Log water and protein intake.", load_score=1),
    ],
    "learning": [
        PlanTask(title="Focused study block (25m)", description="One distraction-free pomodoro.", load_score=2),
        PlanTask(title="Review notes (10m)", description="Recall yesterday's material without looking.", load_score=1),
    ],
    "business": [
        PlanTask(
            title="Ship one output",
            description="Publish a post, send a pitch, or improve the offer page.",
            load_score=2,
            proof_mode="realtime",
        ),
    ],
    "creative": [
        PlanTask(
            title="Daily creative reps (20m)",
            description="Make something small, even if rough.",
            load_score=2,
            proof_mode="realtime",
        ),
    ],
    "general": [
        PlanTask(title="Daily progress step", description="One small, verifiable action toward the goal.", load_score=1),
        PlanTask(title="Evening reflection", description="Note what worked and the next step.", load_score=1),
    ],
}

TODAY_POOLS: Dict[str, List[PlanTask]] = {
    "fitness": [
        PlanTask(title="Strength session", description="Full-body compound lifts, 3 sets each.", load_score=2, proof_mode="realtime"),
        PlanTask(title="Mobility flow", description="15 minutes of hips, shoulders, and spine.", load_score=1),
        PlanTask(title="Conditioning intervals", description="6 rounds of 1 min hard / 1 min easy.", load_score=2, proof_mode="realtime"),
        PlanTask(title="Meal prep", description="Prepare protein-forward meals for two days.", load_score=1),
    ],
    "learning": [
        PlanTask(title="Deep study session", description="Cover one new topic and summarize it.", load_score=2),
        PlanTask(title="Practice problems", description="Solve 10 problems on recent material.", load_score=2, proof_mode="realtime"),
        PlanTask(title="Teach it back", description="Explain one concept aloud or in writing.", load_score=1),
        PlanTask(title="Flashcard build", description="Turn today's notes into 10 cards.", load_score=1),
    ],
    "business": [
        PlanTask(title="Customer outreach", description="Contact 10 potential customers.", load_score=2, proof_mode="realtime"),
        PlanTask(title="Offer refinement", description="Tighten the offer headline and price.", load_score=1),
        PlanTask(title="Build asset", description="Create one landing section, listing, or video.", load_score=3),
        PlanTask(title="Numbers check", description="Record leads, conversions, and revenue.", load_score=1),
    ],
    "creative": [
        PlanTask(title="Study a reference", description="Break down one piece you admire.", load_score=1),
        PlanTask(title="Project session", description="Push the main project forward for 45 minutes.", load_score=3, proof_mode="realtime"),
        PlanTask(title="Share work in progress", description="Post or show a draft and collect feedback.", load_score=1),
        PlanTask(title="Skill drill", description="Practice one technique in isolation.", load_score=2),
    ],
    "general": [
        PlanTask(title="Plan next milestone", description="Define the next checkpoint and its done-signal.", load_score=1),
        PlanTask(title="Focused work block", description="45 minutes on the hardest part of the goal.", load_score=3),
        PlanTask(title="Remove one blocker", description="Fix, ask, or buy the thing slowing you down.", load_score=2),
        PlanTask(title="Research session", description="Collect three resources for the next step.", load_score=1),
    ],
}

WEEKLY_REVIEW = PlanTask(title="Weekly review", description="Review the week and adjust next week's plan.", load_score=1)
SETUP_TASK = PlanTask(title="Set up for tomorrow", description="Prepare tools and pick tomorrow's first task.", load_score=1)


def classify_client_category(text: str) -> str:
    lowered = text.lower()
    for pattern, category in CATEGORY_RULES:
        if pattern.search(lowered):
            return category
    return "general"


def candidate_tasks(category: str, offset: int) -> List[PlanTask]:
    """Today-task candidates for day ``offset`` before any capping."""
    pool = TODAY_POOLS[category]
    candidates = [pool[offset % len(pool)]]
    if offset % 2 == 0:
        extra = pool[(offset + 2) % len(pool)]
        if extra.title != candidates[0].title:
            candidates.append(extra)
    if offset > 0 and offset % 7 == 6:
        candidates.append(WEEKLY_REVIEW)
    return candidates


def cap_day(candidates: List[PlanTask], streak_load: int) -> List[PlanTask]:
    """Greedily keep the heaviest tasks that fit the count and load budgets."""
    accepted: List[PlanTask] = []
    load = streak_load
    for task in sorted(candidates, key=lambda t: t.load_score, reverse=True):
        if len(accepted) >= MAX_TODAY_TASKS:
            break
        if load + task.load_score > MAX_DAILY_LOAD:
            continue
        accepted.append(task)
        load += task.load_score
    return accepted


def create_client_plan(
    title: str,
    description: Optional[str],
    deadline_iso: str,
    *,
    now: Optional[datetime] = None,
    start_iso: Optional[str] = None,
) -> ClientPlan:
    current = now or datetime.now()
    start = start_iso or current.date().isoformat()
    category = classify_client_category(f"{title} {description or ''}")
    streaks = [habit.model_copy() for habit in STREAK_TEMPLATES[category]]
    streak_load = sum(habit.load_score for habit in streaks)

    late_start = to_local_date(start) == current.date() and current.hour >= settings.planner_cutoff_hour
    daily_plan: List[DailyPlanEntry] = []
    for offset, day in enumerate(each_day_iso_inclusive(start, deadline_iso)):
        if offset == 0 and late_start:
            tasks = cap_day([SETUP_TASK], streak_load)
        else:
            tasks = cap_day(candidate_tasks(category, offset), streak_load)
        daily_plan.append(DailyPlanEntry(date=day, today_tasks=[t.model_copy() for t in tasks]))

    return ClientPlan(category=category, streak_habits=streaks, daily_plan=daily_plan)


def convert_plan_to_tasks(plan: ClientPlan, goal_id: str) -> List[ClientTaskRow]:
    """Flatten a plan into per-day streak and today rows with load-derived XP."""
    rows: List[ClientTaskRow] = []
    for day in plan.daily_plan:
        for habit in plan.streak_habits:
            rows.append(
                ClientTaskRow(
                    goal_id=goal_id,
                    title=habit.title,
                    description=habit.description,
                    type="streak",
                    date_iso=day.date,
                    load_score=habit.load_score,
                    proof_mode=habit.proof_mode,
                    xp_value=habit.load_score * STREAK_XP_PER_LOAD,
                )
            )
        for task in day.today_tasks:
            rows.append(
                ClientTaskRow(
                    goal_id=goal_id,
                    title=task.title,
                    description=task.description,
                    type="today",
                    date_iso=day.date,
                    load_score=task.load_score,
                    proof_mode=task.proof_mode,
                    xp_value=task.load_score * TODAY_XP_PER_LOAD,
                )
            )
    return rows


def validate_client_plan(plan: ClientPlan) -> List[str]:
    """Business-rule checks beyond the field constraints; empty means valid."""
    errors: List[str] = []
    for index, day in enumerate(plan.daily_plan, start=1):
        total = plan.streak_load + sum(task.load_score for task in day.today_tasks)
        if total > MAX_DAILY_LOAD:
            errors.append(f"Day {index} ({day.date}): total daily load {total} exceeds maximum of {MAX_DAILY_LOAD}")
        titles = [task.title.lower() for task in day.today_tasks]
        duplicates = sorted({title for title in titles if titles.count(title) > 1})
        if duplicates:
            errors.append(f"Day {index} ({day.date}): duplicate task titles: {', '.join(duplicates)}")
    dates = [day.date for day in plan.daily_plan]
    for index in range(1, len(dates)):
        if dates[index] <= dates[index - 1]:
            errors.append(f"Dates must be in chronological order; issue at day {index + 1}")
    return errors
