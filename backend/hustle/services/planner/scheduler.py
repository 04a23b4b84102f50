"""Assemble a goal's plan and seed it into the task table.

Rows are built exclusively through a ``TaskColumnMap`` detected once per call.
Today tasks go in one bulk insert; streak habits are replicated over every day
of the goal and inserted sequentially in bounded chunks. There is no
transaction spanning the chunks: the first failure stops the run and the
resulting ``PlanInsertionError`` says how much was already committed.
"""
from __future__ import annotations

import json
import logging
from dataclasses import replace
from itertools import islice
from time import perf_counter
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from hustle.core.config import settings
from hustle.core.context import get_request_id
from hustle.db.task_columns import (
    DESCRIPTION_COL,
    GOAL_ID_COL,
    TITLE_COL,
    USER_ID_COL,
    TaskColumnMap,
    detect_task_column_map,
)
from hustle.db.task_store import TaskStore
from hustle.observability.metrics import log_metric
from hustle.observability.tracing import trace, update_trace
from hustle.services.client_planner import ClientPlan, ClientTaskRow, convert_plan_to_tasks
from hustle.services.planner.date_range import each_day_iso_inclusive, to_local_date
from hustle.services.planner.personalizer import personalize_plan
from hustle.services.planner.selector import build_plan
from hustle.services.planner.types import GoalInput, PlanResult, ScheduledTask, SeedResult, StreakTaskSpec

logger = logging.getLogger(__name__)

BLUEPRINT_SOURCE = "blueprint_v1"
CLIENT_PLANNER_SOURCE = "client_planner_v1"

KICKOFF_XP = 20


class PlanInsertionError(RuntimeError):
    """A bulk insert failed; earlier chunks may already be committed.

    The message never carries driver output; the underlying error is kept as
    ``__cause__`` and logged where it is raised.
    """

    def __init__(self, message: str, *, stage: str, chunks_committed: int, rows_committed: int) -> None:
        super().__init__(message)
        self.stage = stage
        self.chunks_committed = chunks_committed
        self.rows_committed = rows_committed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "chunks_committed": self.chunks_committed,
            "rows_committed": self.rows_committed,
        }


def normalize_goal_dates(goal: GoalInput) -> GoalInput:
    """Reduce start and deadline to plain ISO calendar days."""
    start_iso = to_local_date(goal.created_at_iso).isoformat()
    deadline_iso = to_local_date(goal.deadline_iso).isoformat()
    if (start_iso, deadline_iso) == (goal.created_at_iso, goal.deadline_iso):
        return goal
    return replace(goal, created_at_iso=start_iso, deadline_iso=deadline_iso)


def plan_end_iso(goal: GoalInput) -> str:
    """Deadline, or the start day when the deadline is not after it."""
    days = each_day_iso_inclusive(goal.created_at_iso, goal.deadline_iso)
    return days[-1]


def kickoff_task(goal: GoalInput) -> ScheduledTask:
    return ScheduledTask(
        goal_id=goal.id,
        title=f"Kickoff: {goal.title}",
        description="Set up what you need and complete the first concrete step today.",
        xp=KICKOFF_XP,
        date_iso=goal.created_at_iso,
        proof_required=False,
        tags=("kickoff",),
    )


def ensure_kickoff(goal: GoalInput, schedule: Sequence[ScheduledTask]) -> Tuple[ScheduledTask, ...]:
    if any(task.date_iso == goal.created_at_iso for task in schedule):
        return tuple(schedule)
    return (kickoff_task(goal), *schedule)


def trim_to_range(schedule: Sequence[ScheduledTask], start_iso: str, end_iso: str) -> Tuple[ScheduledTask, ...]:
    return tuple(task for task in schedule if start_iso <= task.date_iso <= end_iso)


def assemble_plan(goal: GoalInput, *, personalize: bool = False, personalizer_client: Optional[Any] = None) -> PlanResult:
    """Blueprint output clipped to the goal's own days, with a day-0 task guaranteed."""
    goal = normalize_goal_dates(goal)
    plan = build_plan(goal)
    if personalize:
        plan = personalize_plan(goal, plan, client=personalizer_client)

    end_iso = plan_end_iso(goal)
    notes = list(plan.notes)
    schedule = trim_to_range(plan.schedule, goal.created_at_iso, end_iso)
    dropped = len(plan.schedule) - len(schedule)
    if dropped:
        notes.append(f"Dropped {dropped} scheduled tasks after {end_iso}")
    with_kickoff = ensure_kickoff(goal, schedule)
    if len(with_kickoff) != len(schedule):
        notes.append("Kickoff task added for start day")
    return PlanResult(streaks=plan.streaks, schedule=with_kickoff, notes=tuple(notes), blueprint=plan.blueprint)


def build_task_row(
    column_map: TaskColumnMap,
    *,
    user_id: str,
    goal_id: str,
    title: str,
    description: str,
    xp: int,
    date_iso: str,
    is_streak: bool,
    proof_required: Optional[bool] = None,
    tags: Sequence[str] = (),
    time_value: Optional[str] = None,
    priority: Optional[str] = None,
    load_score: Optional[int] = None,
    source: Optional[str] = None,
) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        USER_ID_COL: user_id,
        GOAL_ID_COL: goal_id,
        TITLE_COL: title,
        DESCRIPTION_COL: description,
        column_map.xp_col: xp,
    }
    for col in column_map.date_cols:
        row[col] = column_map.date_value(col, date_iso)
    if column_map.type_map is not None:
        row[column_map.type_map.col] = column_map.type_value(is_streak)
    if column_map.time_col and time_value is not None:
        row[column_map.time_col] = time_value
    if column_map.proof_col and proof_required is not None:
        row[column_map.proof_col] = proof_required
    if column_map.tags_col:
        # Keep the key on every row so bulk inserts share one column set.
        row[column_map.tags_col] = json.dumps(list(tags)) if tags else None
    if column_map.priority_col and priority:
        row[column_map.priority_col] = priority
    if column_map.load_col and load_score is not None:
        row[column_map.load_col] = load_score
    if column_map.source_col and source:
        row[column_map.source_col] = source
    return row


def chunked(rows: Iterable[Dict[str, Any]], size: int) -> Iterator[List[Dict[str, Any]]]:
    if size < 1:
        raise ValueError("chunk size must be at least 1")
    iterator = iter(rows)
    while True:
        batch = list(islice(iterator, size))
        if not batch:
            return
        yield batch


def streak_rows(
    column_map: TaskColumnMap,
    streaks: Sequence[StreakTaskSpec],
    days: Sequence[str],
    *,
    user_id: str,
    goal_id: str,
    priority: Optional[str] = None,
) -> Iterator[Dict[str, Any]]:
    """Yield one row per (day, streak habit) pair, day-major."""
    for day in days:
        for habit in streaks:
            yield build_task_row(
                column_map,
                user_id=user_id,
                goal_id=goal_id,
                title=habit.title,
                description=habit.description,
                xp=habit.xp,
                date_iso=day,
                is_streak=True,
                proof_required=habit.proof_required,
                priority=priority,
                source=BLUEPRINT_SOURCE,
            )


def insert_today_rows(store: TaskStore, rows: List[Dict[str, Any]]) -> int:
    if not rows:
        return 0
    try:
        return store.insert_rows(rows)
    except Exception as exc:
        logger.exception("Today task insert of %s rows failed", len(rows))
        raise PlanInsertionError(
            f"Failed to insert {len(rows)} today tasks ({type(exc).__name__})",
            stage="today",
            chunks_committed=0,
            rows_committed=0,
        ) from exc


def insert_streak_chunks(store: TaskStore, rows: Iterable[Dict[str, Any]], chunk_size: int) -> Tuple[int, int]:
    """Insert ``rows`` chunk by chunk; returns (rows inserted, chunks committed)."""
    inserted = 0
    chunks = 0
    for batch in chunked(rows, chunk_size):
        try:
            inserted += store.insert_rows(batch)
        except Exception as exc:
            logger.exception("Streak chunk %s (%s rows) failed", chunks + 1, len(batch))
            raise PlanInsertionError(
                f"Streak chunk {chunks + 1} failed after {chunks} committed chunks ({type(exc).__name__})",
                stage="streak",
                chunks_committed=chunks,
                rows_committed=inserted,
            ) from exc
        chunks += 1
        logger.debug("Committed streak chunk %s (%s rows)", chunks, len(batch))
    return inserted, chunks


def _resolve_chunk_size(chunk_size: Optional[int]) -> int:
    size = settings.streak_insert_chunk_size if chunk_size is None else chunk_size
    if size < 1:
        raise ValueError("chunk size must be at least 1")
    return size


def plan_and_insert(
    goal: GoalInput,
    store: TaskStore,
    user_id: str,
    *,
    chunk_size: Optional[int] = None,
    personalize: bool = False,
    personalizer_client: Optional[Any] = None,
    date_column_override: Optional[str] = None,
) -> SeedResult:
    """Plan ``goal`` and seed its today + streak tasks for ``user_id``."""
    size = _resolve_chunk_size(chunk_size)
    goal = normalize_goal_dates(goal)
    request_id = get_request_id()
    started = perf_counter()
    trace_metadata = {"goal_id": goal.id, "chunk_size": size}

    with trace("plan.seed", metadata=trace_metadata, user_id=user_id, request_id=request_id) as span:
        plan = assemble_plan(goal, personalize=personalize, personalizer_client=personalizer_client)
        logger.info(
            "Planning goal %s with %s blueprint (%s streaks, %s scheduled)",
            goal.id,
            plan.blueprint,
            len(plan.streaks),
            len(plan.schedule),
        )

        column_map = detect_task_column_map(
            store,
            date_column_override=date_column_override if date_column_override is not None else settings.tasks_date_column,
        )

        today_rows = [
            build_task_row(
                column_map,
                user_id=user_id,
                goal_id=goal.id,
                title=task.title,
                description=task.description,
                xp=task.xp,
                date_iso=task.date_iso,
                is_streak=False,
                proof_required=task.proof_required,
                tags=task.tags,
                time_value=settings.default_task_time,
                priority=goal.priority,
                source=BLUEPRINT_SOURCE,
            )
            for task in plan.schedule
        ]
        inserted_today = insert_today_rows(store, today_rows)

        days = each_day_iso_inclusive(goal.created_at_iso, goal.deadline_iso)
        rows = streak_rows(column_map, plan.streaks, days, user_id=user_id, goal_id=goal.id, priority=goal.priority)
        inserted_streak, chunks = insert_streak_chunks(store, rows, size)

        result = SeedResult(
            goal_id=goal.id,
            blueprint=plan.blueprint,
            inserted_today=inserted_today,
            inserted_streak=inserted_streak,
            streak_chunks=chunks,
            notes=plan.notes,
        )
        update_trace(
            span,
            {
                **trace_metadata,
                "blueprint": plan.blueprint,
                "days": len(days),
                "inserted_today": inserted_today,
                "inserted_streak": inserted_streak,
                "streak_chunks": chunks,
            },
        )

    latency_ms = (perf_counter() - started) * 1000
    logger.info(
        "Seeded goal %s: %s today rows, %s streak rows in %s chunks (%.0f ms)",
        goal.id,
        inserted_today,
        inserted_streak,
        chunks,
        latency_ms,
    )
    metric_metadata = {"goal_id": goal.id, "blueprint": plan.blueprint}
    log_metric("plan.seed.today_rows", inserted_today, metadata=metric_metadata)
    log_metric("plan.seed.streak_rows", inserted_streak, metadata=metric_metadata)
    log_metric("plan.seed.latency_ms", latency_ms, metadata=metric_metadata)
    return result


def client_task_row(column_map: TaskColumnMap, task: ClientTaskRow, *, user_id: str) -> Dict[str, Any]:
    is_streak = task.type == "streak"
    return build_task_row(
        column_map,
        user_id=user_id,
        goal_id=task.goal_id,
        title=task.title,
        description=task.description,
        xp=task.xp_value,
        date_iso=task.date_iso,
        is_streak=is_streak,
        proof_required=task.proof_mode == "realtime",
        time_value=None if is_streak else settings.default_task_time,
        load_score=task.load_score,
        source=CLIENT_PLANNER_SOURCE,
    )


def insert_client_plan(
    goal_id: str,
    plan: ClientPlan,
    store: TaskStore,
    user_id: str,
    *,
    chunk_size: Optional[int] = None,
    date_column_override: Optional[str] = None,
) -> SeedResult:
    """Seed the output of the local fallback planner through the same column map."""
    size = _resolve_chunk_size(chunk_size)
    with trace("plan.seed_client", metadata={"goal_id": goal_id, "chunk_size": size}, user_id=user_id):
        column_map = detect_task_column_map(
            store,
            date_column_override=date_column_override if date_column_override is not None else settings.tasks_date_column,
        )
        tasks = convert_plan_to_tasks(plan, goal_id)
        today_rows = [client_task_row(column_map, t, user_id=user_id) for t in tasks if t.type == "today"]
        streak_task_rows = (client_task_row(column_map, t, user_id=user_id) for t in tasks if t.type == "streak")
        inserted_today = insert_today_rows(store, today_rows)
        inserted_streak, chunks = insert_streak_chunks(store, streak_task_rows, size)

    logger.info(
        "Seeded goal %s from client planner: %s today rows, %s streak rows",
        goal_id,
        inserted_today,
        inserted_streak,
    )
    return SeedResult(
        goal_id=goal_id,
        blueprint="client",
        inserted_today=inserted_today,
        inserted_streak=inserted_streak,
        streak_chunks=chunks,
        notes=(f"Client planner: {len(plan.daily_plan)} days",),
    )
