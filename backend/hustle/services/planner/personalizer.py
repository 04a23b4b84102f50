"""Optional LLM pass that rewrites plan wording without touching structure."""
from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, TypeVar

import openai

from hustle.core.config import settings
from hustle.observability.tracing import trace
from hustle.services.planner.types import GoalInput, PlanResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

SYSTEM_PROMPT = (
    "You are Hustle, a disciplined but helpful coach.\n"
    "Refine titles/descriptions for clarity and motivation. Do not change dates or counts.\n"
    "Keep streak items habit-like. Keep schedule task dates identical.\n"
    "Return a JSON object with the same `streaks` and `schedule` arrays, "
    "each entry holding only `title` and `description`."
)


def build_personalize_payload(goal: GoalInput, plan: PlanResult) -> Dict[str, Any]:
    return {
        "title": goal.title,
        "description": goal.description or "",
        "category": goal.category or "",
        "streaks": [{"title": s.title, "description": s.description} for s in plan.streaks],
        "schedule": [
            {"title": t.title, "description": t.description, "dateISO": t.date_iso} for t in plan.schedule
        ],
    }


def personalize_plan(goal: GoalInput, plan: PlanResult, client: Optional[Any] = None) -> PlanResult:
    """Return ``plan`` with rewritten text, or unchanged when personalization is unavailable."""
    if client is None:
        if not settings.personalizer_enabled or not settings.openai_api_key:
            return plan
        client = openai.OpenAI(api_key=settings.openai_api_key)

    payload = build_personalize_payload(goal, plan)
    try:
        with trace("plan.personalize", metadata={"goal_id": goal.id, "blueprint": plan.blueprint}):
            completion = client.chat.completions.create(
                model=settings.personalizer_model,
                response_format={"type": "json_object"},
                temperature=0.4,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": json.dumps(payload)},
                ],
            )
        content = completion.choices[0].message.content or "{}"
        parsed = json.loads(content)
        if not isinstance(parsed, dict):
            raise ValueError("personalizer response is not a JSON object")
    except Exception as exc:
        logger.warning("Personalization skipped for goal %s: %s", goal.id, exc)
        return plan

    return replace(
        plan,
        streaks=tuple(_merge_text(plan.streaks, parsed.get("streaks"))),
        schedule=tuple(_merge_text(plan.schedule, parsed.get("schedule"))),
        notes=plan.notes + ("Personalized wording applied",),
    )


def _merge_text(items: Sequence[T], rewritten: Any) -> List[T]:
    """Overwrite title/description by index; everything else is kept."""
    merged = list(items)
    if not isinstance(rewritten, list):
        return merged
    for index, entry in enumerate(rewritten[: len(merged)]):
        if not isinstance(entry, dict):
            continue
        changes = {}
        for field_name in ("title", "description"):
            value = entry.get(field_name)
            if isinstance(value, str) and value.strip():
                changes[field_name] = value.strip()
        if changes:
            merged[index] = replace(merged[index], **changes)
    return merged
