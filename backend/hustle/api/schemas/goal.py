"""Schemas for goal creation."""
from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


class GoalCreateRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=128)
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    category: Optional[str] = Field(default=None, max_length=100)
    deadline: date
    start_date: Optional[date] = None
    target_value: Optional[float] = None
    unit: Optional[str] = Field(default=None, max_length=50)
    priority: Optional[Literal["low", "medium", "high"]] = None

    @field_validator("title")
    @classmethod
    def trim_title(cls, value: str) -> str:
        cleaned = value.strip()
        if len(cleaned) < 3:
            raise ValueError("title must be at least 3 characters after trimming")
        return cleaned


class GoalResponse(BaseModel):
    id: str
    user_id: str
    title: str
    description: Optional[str]
    category: Optional[str]
    start_date: date
    deadline: date
    priority: Optional[str]
    request_id: str
