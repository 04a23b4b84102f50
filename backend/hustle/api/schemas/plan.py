"""Schemas for plan seeding and previews."""
from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from hustle.services.client_planner import ClientPlan


class PlanSeedRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    planner: Literal["blueprint", "client"] = "blueprint"
    personalize: bool = False


class PlanSeedResponse(BaseModel):
    goal_id: str
    blueprint: str
    inserted_today: int
    inserted_streak: int
    streak_chunks: int
    notes: List[str]
    request_id: str


class PlanPreviewRequest(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = None
    deadline: date
    start_date: Optional[date] = None


class StreakPayload(BaseModel):
    title: str
    description: str
    xp: int
    proof_required: bool


class ScheduledTaskPayload(BaseModel):
    title: str
    description: str
    xp: int
    date: date
    proof_required: bool
    tags: List[str]


class PlanPreviewResponse(BaseModel):
    blueprint: str
    days: int
    streaks: List[StreakPayload]
    schedule: List[ScheduledTaskPayload]
    notes: List[str]


class OfflinePreviewResponse(BaseModel):
    category: str
    plan: ClientPlan
    streak_rows: int
    today_rows: int
    total_xp: int
    validation_errors: List[str]
