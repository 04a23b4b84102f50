"""Task storage collaborator used by the planner.

The planner only needs three operation shapes from storage: a zero-row column
probe, a single non-null value sample, and a bulk insert. ``SqlTaskStore``
implements them with SQLAlchemy Core against a table whose columns are not
known up front.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping

from sqlalchemy import column, insert, select, table
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError

logger = logging.getLogger(__name__)


class TaskStore:
    """Interface the planner depends on."""

    def column_exists(self, name: str) -> bool:
        raise NotImplementedError

    def sample_value(self, name: str) -> Any:
        """Return one non-null value stored in ``name`` or ``None``."""
        raise NotImplementedError

    def insert_rows(self, rows: List[Dict[str, Any]]) -> int:
        """Insert ``rows`` in a single bulk operation and return the count."""
        raise NotImplementedError


class SqlTaskStore(TaskStore):
    def __init__(self, engine: Engine, table_name: str = "tasks") -> None:
        self.engine = engine
        self.table_name = table_name

    def _table(self, names: Iterable[str]):
        return table(self.table_name, *[column(name) for name in names])

    def column_exists(self, name: str) -> bool:
        tbl = self._table([name])
        stmt = select(tbl.c[name]).limit(0)
        try:
            with self.engine.connect() as conn:
                conn.execute(stmt)
        except DBAPIError as exc:
            logger.debug("Column probe %s.%s failed: %s", self.table_name, name, exc.orig)
            return False
        return True

    def sample_value(self, name: str) -> Any:
        tbl = self._table([name])
        stmt = select(tbl.c[name]).where(tbl.c[name].is_not(None)).limit(1)
        try:
            with self.engine.connect() as conn:
                return conn.execute(stmt).scalar()
        except DBAPIError as exc:
            logger.debug("Value sample %s.%s failed: %s", self.table_name, name, exc.orig)
            return None

    def insert_rows(self, rows: List[Dict[str, Any]]) -> int:
        if not rows:
            return 0
        tbl = self._table(_column_names(rows))
        # One transaction per call: a committed chunk stays committed.
        with self.engine.begin() as conn:
            conn.execute(insert(tbl), rows)
        return len(rows)


def _column_names(rows: List[Mapping[str, Any]]) -> List[str]:
    names: Dict[str, None] = {}
    for row in rows:
        for key in row:
            names.setdefault(key, None)
    return list(names)
