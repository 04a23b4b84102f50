"""Tests for the optional wording pass over generated plans."""
from __future__ import annotations

import json
from types import SimpleNamespace

from hustle.core.config import settings
from hustle.services.planner.personalizer import build_personalize_payload, personalize_plan
from hustle.services.planner.selector import build_plan
from hustle.services.planner.types import GoalInput


class _FakeCompletions:
    def __init__(self, content: str | None = None, error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(completions: _FakeCompletions) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def _goal() -> GoalInput:
    return GoalInput(id="g1", title="Build a personal website", created_at_iso="2024-01-01", deadline_iso="2024-01-20")


def test_rewrites_text_but_keeps_structure() -> None:
    goal = _goal()
    plan = build_plan(goal)
    completions = _FakeCompletions(
        json.dumps(
            {
                "streaks": [{"title": "Code for 30 minutes", "description": "Commit something."}],
                "schedule": [{"title": "Ship the navbar", "dateISO": "1999-01-01"}, "junk"],
            }
        )
    )

    result = personalize_plan(goal, plan, client=_client(completions))

    assert len(result.streaks) == len(plan.streaks)
    assert len(result.schedule) == len(plan.schedule)
    assert result.streaks[0].title == "Code for 30 minutes"
    assert result.streaks[0].xp == plan.streaks[0].xp
    assert result.streaks[1] == plan.streaks[1]
    assert result.schedule[0].title == "Ship the navbar"
    assert result.schedule[0].description == plan.schedule[0].description
    assert [t.date_iso for t in result.schedule] == [t.date_iso for t in plan.schedule]
    assert result.notes[-1] == "Personalized wording applied"
    assert completions.calls[0]["response_format"] == {"type": "json_object"}


def test_client_error_returns_unchanged_plan() -> None:
    goal = _goal()
    plan = build_plan(goal)

    result = personalize_plan(goal, plan, client=_client(_FakeCompletions(error=RuntimeError("timeout"))))

    assert result == plan


def test_unparseable_output_returns_unchanged_plan() -> None:
    goal = _goal()
    plan = build_plan(goal)

    assert personalize_plan(goal, plan, client=_client(_FakeCompletions("not json"))) == plan
    assert personalize_plan(goal, plan, client=_client(_FakeCompletions("[1, 2]"))) == plan


def test_disabled_without_client_or_key(monkeypatch) -> None:
    monkeypatch.setattr(settings, "personalizer_enabled", True)
    monkeypatch.setattr(settings, "openai_api_key", None)
    goal = _goal()
    plan = build_plan(goal)

    assert personalize_plan(goal, plan) is plan


def test_payload_carries_dates_for_context() -> None:
    goal = _goal()
    payload = build_personalize_payload(goal, build_plan(goal))

    assert payload["title"] == goal.title
    assert all("dateISO" in entry for entry in payload["schedule"])
