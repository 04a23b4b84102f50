"""Goal creation and plan seeding API routes."""
from __future__ import annotations

from datetime import date, datetime, timezone
from time import perf_counter
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hustle.api.schemas.goal import GoalCreateRequest, GoalResponse
from hustle.api.schemas.plan import PlanSeedRequest, PlanSeedResponse
from hustle.core.config import settings
from hustle.db.deps import get_db
from hustle.db.models.goal import Goal
from hustle.db.task_columns import ColumnSchemaError
from hustle.db.task_store import SqlTaskStore
from hustle.observability.metrics import log_metric
from hustle.observability.tracing import trace
from hustle.services.client_planner import create_client_plan
from hustle.services.planner.scheduler import PlanInsertionError, insert_client_plan, plan_and_insert
from hustle.services.planner.types import GoalInput, SeedResult

router = APIRouter()


@router.post("/goals", response_model=GoalResponse, status_code=status.HTTP_201_CREATED, tags=["goals"])
def create_goal_endpoint(
    payload: GoalCreateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> GoalResponse:
    """Store a new goal; tasks are seeded separately via /goals/{id}/plan."""
    request_id = getattr(http_request.state, "request_id", None)
    goal = Goal(
        user_id=payload.user_id,
        title=payload.title,
        description=payload.description,
        category=payload.category,
        start_date=payload.start_date or date.today(),
        deadline=payload.deadline,
        target_value=payload.target_value,
        unit=payload.unit,
        priority=payload.priority,
        metadata_json={},
    )
    with trace("goal.create", metadata={"route": "/goals"}, user_id=payload.user_id, request_id=request_id):
        db.add(goal)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to save goal",
            ) from exc
        db.refresh(goal)

    return GoalResponse(
        id=goal.id,
        user_id=goal.user_id,
        title=goal.title,
        description=goal.description,
        category=goal.category,
        start_date=goal.start_date,
        deadline=goal.deadline,
        priority=goal.priority,
        request_id=request_id or "",
    )


@router.post("/goals/{goal_id}/plan", response_model=PlanSeedResponse, tags=["goals"])
def seed_goal_plan_endpoint(
    goal_id: str,
    payload: PlanSeedRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> PlanSeedResponse:
    """Generate the goal's plan and insert its today and streak tasks."""
    goal = db.get(Goal, goal_id)
    if not goal:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Goal not found")
    if goal.user_id != payload.user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Goal belongs to another user")

    request_id = getattr(http_request.state, "request_id", None)
    store = SqlTaskStore(db.get_bind(), settings.tasks_table)
    goal_input = _goal_input(goal)
    base_metadata: Dict[str, Any] = {
        "route": f"/goals/{goal_id}/plan",
        "goal_id": goal_id,
        "planner": payload.planner,
        "request_id": request_id,
    }

    start_time = perf_counter()
    success = False
    result: SeedResult | None = None
    try:
        with trace("goal.plan", metadata=base_metadata, user_id=goal.user_id, request_id=request_id):
            if payload.planner == "client":
                plan = create_client_plan(
                    goal.title,
                    goal.description,
                    goal_input.deadline_iso,
                    start_iso=goal_input.created_at_iso,
                )
                result = insert_client_plan(goal.id, plan, store, goal.user_id)
            else:
                result = plan_and_insert(goal_input, store, goal.user_id, personalize=payload.personalize)
        success = True
    except ColumnSchemaError as exc:
        _record_plan_status(db, goal, {"status": "failed", "error": str(exc)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Task storage is not compatible: {exc}",
        ) from exc
    except PlanInsertionError as exc:
        # The goal stays; the caller decides whether to delete it or retry.
        _record_plan_status(db, goal, {"status": "partial", "error": str(exc), **exc.to_dict()})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Failed to seed plan tasks", **exc.to_dict()},
        ) from exc
    finally:
        latency_ms = (perf_counter() - start_time) * 1000
        metric_metadata = {"goal_id": goal_id, "planner": payload.planner}
        log_metric("goal.plan.success", 1 if success else 0, metadata=metric_metadata)
        log_metric("goal.plan.latency_ms", latency_ms, metadata=metric_metadata)

    _record_plan_status(
        db,
        goal,
        {
            "status": "seeded",
            "blueprint": result.blueprint,
            "notes": list(result.notes),
            "inserted_today": result.inserted_today,
            "inserted_streak": result.inserted_streak,
            "seeded_at": datetime.now(timezone.utc).isoformat(),
        },
    )
    return PlanSeedResponse(
        goal_id=result.goal_id,
        blueprint=result.blueprint,
        inserted_today=result.inserted_today,
        inserted_streak=result.inserted_streak,
        streak_chunks=result.streak_chunks,
        notes=list(result.notes),
        request_id=request_id or "",
    )


def _goal_input(goal: Goal) -> GoalInput:
    return GoalInput(
        id=goal.id,
        title=goal.title,
        description=goal.description,
        category=goal.category,
        created_at_iso=goal.start_date.isoformat(),
        deadline_iso=goal.deadline.isoformat(),
        target_value=goal.target_value,
        unit=goal.unit,
        priority=goal.priority,
    )


def _record_plan_status(db: Session, goal: Goal, plan_status: Dict[str, Any]) -> None:
    metadata = dict(goal.metadata_json or {})
    metadata["plan_v1"] = plan_status
    goal.metadata_json = metadata
    db.add(goal)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
