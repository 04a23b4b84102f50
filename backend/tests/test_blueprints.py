from __future__ import annotations

from collections import Counter

import pytest

from hustle.services.planner.blueprints import BLUEPRINTS, DAY_BOUNDS, plan_days
from hustle.services.planner.types import GoalInput


def _goal(start: str = "2024-01-01", deadline: str = "2024-03-31", title: str = "Goal") -> GoalInput:
    return GoalInput(id="goal-1", title=title, created_at_iso=start, deadline_iso=deadline)


@pytest.mark.parametrize("name", sorted(BLUEPRINTS))
def test_blueprints_are_deterministic(name: str) -> None:
    goal = _goal()

    assert BLUEPRINTS[name](goal) == BLUEPRINTS[name](goal)


@pytest.mark.parametrize("name", sorted(BLUEPRINTS))
def test_blueprint_invariants(name: str) -> None:
    plan = BLUEPRINTS[name](_goal())

    assert plan.blueprint == name
    assert 1 <= len(plan.streaks) <= 3
    assert all(habit.xp > 0 for habit in plan.streaks)
    assert all(task.xp > 0 and task.goal_id == "goal-1" for task in plan.schedule)
    assert all(task.date_iso >= "2024-01-01" for task in plan.schedule)
    assert len(plan.notes) == 1


def test_plan_days_clamps_to_bounds() -> None:
    assert plan_days(_goal(deadline="2024-01-03"), "muscle") == DAY_BOUNDS["muscle"][0]
    assert plan_days(_goal(deadline="2030-01-01"), "generic") == DAY_BOUNDS["generic"][1]
    assert plan_days(_goal(deadline="2024-01-31"), "coding") == 30


def test_short_goal_still_gets_minimum_blueprint_window() -> None:
    plan = BLUEPRINTS["coding"](_goal(deadline="2024-01-03"))

    # 14 day minimum: milestones on offsets 2, 5, 9 and 12.
    assert [task.date_iso for task in plan.schedule] == ["2024-01-03", "2024-01-06", "2024-01-10", "2024-01-13"]


def test_coding_blueprint_shape() -> None:
    plan = BLUEPRINTS["coding"](_goal())

    assert [habit.title for habit in plan.streaks] == ["Daily Coding (30m)", "Notes/Flashcards (10m)"]
    assert {task.title for task in plan.schedule} == {"Project Milestone"}
    assert all(task.tags == ("coding",) and task.xp == 35 for task in plan.schedule)


def test_generic_blueprint_has_weekly_checkpoint() -> None:
    plan = BLUEPRINTS["generic"](_goal(deadline="2024-01-21"))

    assert [task.date_iso for task in plan.schedule] == ["2024-01-04", "2024-01-11", "2024-01-18"]
    assert {task.title for task in plan.schedule} == {"Checkpoint"}
    journal = [habit for habit in plan.streaks if habit.title == "Journal (5m)"]
    assert journal and journal[0].proof_required is False


def test_money_online_runs_in_phases() -> None:
    plan = BLUEPRINTS["moneyOnline"](_goal(deadline="2024-01-31"))
    by_date = {task.date_iso: task.title for task in plan.schedule if task.title != "Weekly Optimization"}

    assert by_date["2024-01-01"] == "Niche & Offer Research"
    assert by_date["2024-01-07"] == "Niche & Offer Research"
    assert by_date["2024-01-08"] == "Setup Channel"
    assert by_date["2024-01-14"] == "Setup Channel"
    later = [task for task in plan.schedule if task.date_iso >= "2024-01-15"]
    assert {task.title for task in later} == {"Distribution Sprint", "Weekly Optimization"}


def test_language_rotates_tracks() -> None:
    plan = BLUEPRINTS["language"](_goal(deadline="2024-01-14"))

    assert [(task.date_iso, task.title) for task in plan.schedule[:3]] == [
        ("2024-01-02", "Grammar Lesson"),
        ("2024-01-04", "Reading Session"),
        ("2024-01-06", "Conversation Session"),
    ]
    assert len(plan.streaks) == 3


def test_effortful_tasks_spread_across_week() -> None:
    for name in ("language", "muscle", "examStudy", "instrument", "coding"):
        plan = BLUEPRINTS[name](_goal())
        per_day = Counter(task.date_iso for task in plan.schedule)
        assert max(per_day.values()) == 1, name
