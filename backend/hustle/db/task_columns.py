"""Runtime detection of the task table's physical columns.

Deployments of the tasks table drifted over several migrations: the date
column has carried half a dozen names, and the today/streak discriminator has
been a boolean, a text enum, and a JSON blob. Instead of pinning a schema
version, the planner probes the live table once per planning call and builds
an immutable ``TaskColumnMap`` that every row builder receives explicitly.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Literal, Optional, Sequence, Tuple

from hustle.db.task_store import TaskStore

logger = logging.getLogger(__name__)

TypeKind = Literal["json", "text", "bool"]

USER_ID_COL = "user_id"
GOAL_ID_COL = "goal_id"
TITLE_COL = "title"
DESCRIPTION_COL = "description"

# Most specific / most recently introduced names first.
DATE_COLUMN_CANDIDATES: Tuple[str, ...] = (
    "scheduled_for_date",
    "task_date",
    "scheduled_for",
    "due_date",
    "date",
    "due_at",
    "due",
)
TYPE_COLUMN_CANDIDATES: Tuple[str, ...] = (
    "is_streak",
    "streak",
    "is_recurring",
    "recurring",
    "task_type",
    "is_habit",
    "type",
)
TIME_COLUMN_CANDIDATES: Tuple[str, ...] = ("scheduled_time", "due_time", "time")
PROOF_COLUMN_CANDIDATES: Tuple[str, ...] = ("proof_required", "requires_proof", "require_proof", "needs_proof")
TAGS_COLUMN_CANDIDATES: Tuple[str, ...] = ("tags", "labels")
XP_COLUMN_CANDIDATES: Tuple[str, ...] = ("xp_value", "xp")
PRIORITY_COLUMN_CANDIDATES: Tuple[str, ...] = ("priority",)
LOAD_COLUMN_CANDIDATES: Tuple[str, ...] = ("load_score",)
SOURCE_COLUMN_CANDIDATES: Tuple[str, ...] = ("source",)

_TEXT_TYPE_COLUMNS = {"task_type"}
_SAMPLED_TYPE_COLUMNS = {"type"}


class ColumnSchemaError(RuntimeError):
    """Raised when the task table cannot be written by the planner."""


@dataclass(frozen=True)
class TypeMap:
    kind: TypeKind
    col: str


@dataclass(frozen=True)
class TaskColumnMap:
    primary_date_col: str
    also_set_date_cols: Tuple[str, ...] = ()
    time_col: Optional[str] = None
    type_map: Optional[TypeMap] = None
    proof_col: Optional[str] = None
    tags_col: Optional[str] = None
    xp_col: str = XP_COLUMN_CANDIDATES[0]
    priority_col: Optional[str] = None
    load_col: Optional[str] = None
    source_col: Optional[str] = None

    @property
    def date_cols(self) -> Tuple[str, ...]:
        return (self.primary_date_col, *self.also_set_date_cols)

    def date_value(self, col: str, date_iso: str) -> str:
        """Render ``date_iso`` for ``col``; timestamp columns get local noon in UTC."""
        if col.endswith("_at"):
            return f"{date_iso}T12:00:00+00:00"
        return date_iso

    def type_value(self, is_streak: bool) -> Any:
        if self.type_map is None:
            return None
        label = "streak" if is_streak else "today"
        if self.type_map.kind == "bool":
            return is_streak
        if self.type_map.kind == "json":
            return json.dumps({"kind": label})
        return label


def detect_task_column_map(store: TaskStore, *, date_column_override: Optional[str] = None) -> TaskColumnMap:
    """Probe ``store`` and describe which columns the planner should write."""
    date_candidates = list(DATE_COLUMN_CANDIDATES)
    if date_column_override:
        date_candidates = [date_column_override] + [c for c in date_candidates if c != date_column_override]

    date_cols = [name for name in date_candidates if store.column_exists(name)]
    if not date_cols:
        raise ColumnSchemaError(
            "Task table exposes none of the supported date columns: " + ", ".join(date_candidates)
        )

    column_map = TaskColumnMap(
        primary_date_col=date_cols[0],
        also_set_date_cols=tuple(date_cols[1:]),
        time_col=_first_existing(store, TIME_COLUMN_CANDIDATES),
        type_map=_detect_type_map(store),
        proof_col=_first_existing(store, PROOF_COLUMN_CANDIDATES),
        tags_col=_first_existing(store, TAGS_COLUMN_CANDIDATES),
        xp_col=_first_existing(store, XP_COLUMN_CANDIDATES) or XP_COLUMN_CANDIDATES[0],
        priority_col=_first_existing(store, PRIORITY_COLUMN_CANDIDATES),
        load_col=_first_existing(store, LOAD_COLUMN_CANDIDATES),
        source_col=_first_existing(store, SOURCE_COLUMN_CANDIDATES),
    )
    logger.info(
        "Detected task columns date=%s also=%s type=%s proof=%s tags=%s",
        column_map.primary_date_col,
        list(column_map.also_set_date_cols),
        column_map.type_map,
        column_map.proof_col,
        column_map.tags_col,
    )
    return column_map


def _first_existing(store: TaskStore, candidates: Sequence[str]) -> Optional[str]:
    for name in candidates:
        if store.column_exists(name):
            return name
    return None


def _detect_type_map(store: TaskStore) -> Optional[TypeMap]:
    col = _first_existing(store, TYPE_COLUMN_CANDIDATES)
    if col is None:
        return None
    if col in _TEXT_TYPE_COLUMNS:
        return TypeMap(kind="text", col=col)
    if col in _SAMPLED_TYPE_COLUMNS:
        return TypeMap(kind=infer_type_kind(store.sample_value(col)), col=col)
    return TypeMap(kind="bool", col=col)


def infer_type_kind(sample: Any) -> TypeKind:
    """Guess how a generic ``type`` column encodes today/streak from one stored value."""
    if isinstance(sample, bool):
        return "bool"
    if isinstance(sample, int) and sample in (0, 1):
        # SQLite and some drivers hand booleans back as integers.
        return "bool"
    if isinstance(sample, (dict, list)):
        return "json"
    if isinstance(sample, str):
        stripped = sample.strip()
        if stripped.startswith("{"):
            try:
                if isinstance(json.loads(stripped), dict):
                    return "json"
            except ValueError:
                pass
        return "text"
    return "text"
