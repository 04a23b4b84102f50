"""Tests for metrics and tracing helpers."""
from __future__ import annotations

from typing import Any, Dict

import pytest

from hustle.observability import metrics
from hustle.observability import tracing


class _DummyTrace:
    def __init__(self, name: str, metadata: Dict[str, Any]):
        self.name = name
        self.metadata = metadata
        self.updates: list[Dict[str, Any]] = []
        self.ended = False

    def update(self, **kwargs) -> None:
        self.updates.append(kwargs)

    def end(self) -> None:
        self.ended = True


class _DummyClient:
    def __init__(self):
        self.traces: list[_DummyTrace] = []

    def trace(self, name: str, metadata: Dict[str, Any] | None = None):
        trace = _DummyTrace(name, metadata or {})
        self.traces.append(trace)
        return trace


def test_log_metric_closes_trace(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy_client)

    metrics.log_metric("plan.seed.streak_rows", 42, metadata={"blueprint": "coding"})

    assert dummy_client.traces, "Metric call should record a trace"
    assert dummy_client.traces[0].name == "metric:plan.seed.streak_rows"
    assert dummy_client.traces[0].metadata["value"] == 42
    assert dummy_client.traces[0].metadata["blueprint"] == "coding"
    assert dummy_client.traces[0].ended is True


def test_trace_records_error_and_reraises(monkeypatch) -> None:
    dummy_client = _DummyClient()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy_client)

    with pytest.raises(ValueError):
        with tracing.trace("plan.seed", metadata={"goal_id": "g1"}, user_id="u1"):
            raise ValueError("boom")

    recorded = dummy_client.traces[0]
    assert recorded.metadata == {"goal_id": "g1", "user_id": "u1"}
    assert recorded.updates == [{"error_info": {"message": "boom", "type": "ValueError"}}]
    assert recorded.ended is True


def test_update_trace_ignores_disabled_span() -> None:
    tracing.update_trace(None, {"rows": 1})

    span = _DummyTrace("plan.seed", {})
    tracing.update_trace(span, {"rows": 1})
    assert span.updates == [{"metadata": {"rows": 1}}]


def test_log_metric_is_noop_without_client(monkeypatch) -> None:
    monkeypatch.setattr(tracing, "get_opik_client", lambda: None)

    metrics.log_metric("goal.plan.success", 1)
