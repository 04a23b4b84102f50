"""Keyword classification of a goal into a blueprint."""
from __future__ import annotations

import re
from typing import List, Pattern, Tuple

from hustle.services.planner.blueprints import BLUEPRINTS, Blueprint
from hustle.services.planner.types import GoalInput, PlanResult

FALLBACK_BLUEPRINT = "generic"

# First match wins, so order is the tie-break between domains.
BLUEPRINT_RULES: List[Tuple[Pattern[str], str]] = [
    (re.compile(r"\b(spanish|language|french|english|german|japanese|mandarin|learn .*language)\b"), "language"),
    (re.compile(r"\b(muscle|hypertrophy|gain mass|build muscle|strength)\b"), "muscle"),
    (re.compile(r"\b(exam|sat|ib|gcse|enem|vestibular|test|study)\b"), "examStudy"),
    (re.compile(r"\b(guitar|piano|violin|instrument|singing)\b"), "instrument"),
    (re.compile(r"\b(code|coding|programming|dev|software|app|website)\b"), "coding"),
    (
        re.compile(r"\b(money|income|online business|dropship|ecom|affiliate|newsletter|youtube|tiktok|agency)\b"),
        "moneyOnline",
    ),
]


def classify_text(text: str) -> str:
    lowered = text.lower()
    for pattern, name in BLUEPRINT_RULES:
        if pattern.search(lowered):
            return name
    return FALLBACK_BLUEPRINT


def classify_goal(goal: GoalInput) -> str:
    return classify_text(goal.text)


def select_blueprint(goal: GoalInput) -> Tuple[str, Blueprint]:
    name = classify_goal(goal)
    return name, BLUEPRINTS[name]


def build_plan(goal: GoalInput) -> PlanResult:
    """Classify ``goal`` and run the matching blueprint."""
    _, blueprint = select_blueprint(goal)
    return blueprint(goal)
