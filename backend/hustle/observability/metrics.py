"""Planner metrics recorded as short Opik traces."""
from __future__ import annotations

from typing import Any, Dict, Optional

from hustle.observability.tracing import trace


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Record ``value`` under ``metric:<name>``; a no-op when Opik is disabled."""
    payload: Dict[str, Any] = {"value": value}
    if metadata:
        payload.update(metadata)
    with trace(f"metric:{name}", metadata=payload):
        pass
