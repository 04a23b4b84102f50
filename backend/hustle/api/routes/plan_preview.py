"""Plan previews for goals that have not been saved yet."""
from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Request

from hustle.api.schemas.plan import (
    OfflinePreviewResponse,
    PlanPreviewRequest,
    PlanPreviewResponse,
    ScheduledTaskPayload,
    StreakPayload,
)
from hustle.observability.tracing import trace
from hustle.services.client_planner import convert_plan_to_tasks, create_client_plan, validate_client_plan
from hustle.services.planner.date_range import each_day_iso_inclusive
from hustle.services.planner.scheduler import assemble_plan
from hustle.services.planner.types import GoalInput

router = APIRouter()

PREVIEW_GOAL_ID = "preview"


@router.post("/goals/plan/preview", response_model=PlanPreviewResponse, tags=["plans"])
def preview_plan_endpoint(payload: PlanPreviewRequest, http_request: Request) -> PlanPreviewResponse:
    """Show what the blueprint planner would seed, without touching storage."""
    start = payload.start_date or date.today()
    goal = GoalInput(
        id=PREVIEW_GOAL_ID,
        title=payload.title,
        description=payload.description,
        category=payload.category,
        created_at_iso=start.isoformat(),
        deadline_iso=payload.deadline.isoformat(),
    )
    request_id = getattr(http_request.state, "request_id", None)
    with trace("plan.preview", metadata={"route": "/goals/plan/preview"}, request_id=request_id):
        plan = assemble_plan(goal)

    return PlanPreviewResponse(
        blueprint=plan.blueprint,
        days=len(each_day_iso_inclusive(goal.created_at_iso, goal.deadline_iso)),
        streaks=[
            StreakPayload(title=s.title, description=s.description, xp=s.xp, proof_required=s.proof_required)
            for s in plan.streaks
        ],
        schedule=[
            ScheduledTaskPayload(
                title=t.title,
                description=t.description,
                xp=t.xp,
                date=date.fromisoformat(t.date_iso),
                proof_required=t.proof_required,
                tags=list(t.tags),
            )
            for t in plan.schedule
        ],
        notes=list(plan.notes),
    )


@router.post("/goals/plan/offline-preview", response_model=OfflinePreviewResponse, tags=["plans"])
def offline_preview_endpoint(payload: PlanPreviewRequest) -> OfflinePreviewResponse:
    """Run the local fallback planner and report its rows and rule checks."""
    start = payload.start_date or date.today()
    plan = create_client_plan(
        payload.title,
        payload.description,
        payload.deadline.isoformat(),
        now=datetime.now(),
        start_iso=start.isoformat(),
    )
    rows = convert_plan_to_tasks(plan, PREVIEW_GOAL_ID)
    return OfflinePreviewResponse(
        category=plan.category,
        plan=plan,
        streak_rows=sum(1 for row in rows if row.type == "streak"),
        today_rows=sum(1 for row in rows if row.type == "today"),
        total_xp=sum(row.xp_value for row in rows),
        validation_errors=validate_client_plan(plan),
    )
