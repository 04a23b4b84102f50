"""Domain blueprints turning a goal into streak habits and a dated schedule.

Each blueprint is a pure function of the ``GoalInput``. Effortful one-off
tasks are placed on fixed weekday offsets (``offset % 7``) so they spread
across the week instead of bunching up.
"""
from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Tuple

from hustle.services.planner.date_range import add_days_iso, days_between_inclusive
from hustle.services.planner.types import GoalInput, PlanResult, ScheduledTask, StreakTaskSpec

Blueprint = Callable[[GoalInput], PlanResult]

# (min_days, max_days) sanity bounds per blueprint.
DAY_BOUNDS: Dict[str, Tuple[int, int]] = {
    "language": (14, 730),
    "muscle": (28, 365),
    "examStudy": (14, 730),
    "instrument": (14, 730),
    "coding": (14, 730),
    "moneyOnline": (21, 365),
    "generic": (7, 365),
}


def plan_days(goal: GoalInput, blueprint: str) -> int:
    low, high = DAY_BOUNDS[blueprint]
    return max(low, min(high, days_between_inclusive(goal.created_at_iso, goal.deadline_iso)))


def _task(goal: GoalInput, offset: int, title: str, description: str, xp: int, tag: str) -> ScheduledTask:
    return ScheduledTask(
        goal_id=goal.id,
        title=title,
        description=description,
        xp=xp,
        date_iso=add_days_iso(goal.created_at_iso, offset),
        proof_required=True,
        tags=(tag,),
    )


def _result(name: str, streaks: Iterable[StreakTaskSpec], schedule: List[ScheduledTask], note: str) -> PlanResult:
    return PlanResult(streaks=tuple(streaks), schedule=tuple(schedule), notes=(note,), blueprint=name)


def make_language(goal: GoalInput) -> PlanResult:
    days = plan_days(goal, "language")
    streaks = (
        StreakTaskSpec("Daily Vocabulary (20 cards)", "Spaced repetition: add/review 20 cards.", 20, True),
        StreakTaskSpec("Listening Practice (10-20m)", "Podcasts/YouTube comprehensible input.", 15, True),
        StreakTaskSpec("Speaking/Shadowing (5-10m)", "Record yourself or do shadowing.", 15, True),
    )
    tracks = (
        ("Grammar Lesson", "Study one grammar point. Summarize in notes."),
        ("Reading Session", "Read an article/graded reader. Note 10 new words."),
        ("Conversation Session", "30m conversation or self-talk. Log topics."),
    )
    schedule: List[ScheduledTask] = []
    for offset in range(days + 1):
        if offset % 7 in (1, 3, 5):
            title, description = tracks[(offset // 2) % len(tracks)]
            schedule.append(_task(goal, offset, title, description, 30, "language"))
    return _result("language", streaks, schedule, "Language blueprint applied")


def make_muscle(goal: GoalInput) -> PlanResult:
    days = plan_days(goal, "muscle")
    streaks = (
        StreakTaskSpec("Daily Protein Intake", "1.6-2.2 g/kg bodyweight. Log source.", 25, True),
        StreakTaskSpec("Sleep 7-9h / Mobility 10m", "Recovery habit + short mobility.", 15, True),
    )
    split = (
        ("Upper Body A", "Push & pull compounds + accessories."),
        ("Lower Body A", "Squat/hinge focus + posterior chain."),
        ("Upper Body B", "Alt compounds, higher reps."),
        ("Lower Body B", "Accessories + unilateral work."),
    )
    schedule: List[ScheduledTask] = []
    for offset in range(days + 1):
        if offset % 7 in (0, 2, 4, 6):
            title, description = split[(offset // 2) % len(split)]
            schedule.append(_task(goal, offset, title, description, 40, "fitness"))
    return _result("muscle", streaks, schedule, "Muscle blueprint applied")


def make_exam_study(goal: GoalInput) -> PlanResult:
    days = plan_days(goal, "examStudy")
    streaks = (
        StreakTaskSpec("Daily Review (Pomodoro x2)", "2x25m active recall + spaced repetition.", 25, True),
        StreakTaskSpec("Question Bank (20m)", "Do past questions; log weaknesses.", 20, True),
    )
    schedule: List[ScheduledTask] = []
    for offset in range(days + 1):
        if offset % 7 == 2:
            schedule.append(_task(goal, offset, "Deep Study Block (90m)", "New content + summary sheet.", 35, "exam"))
        if offset % 7 == 5:
            schedule.append(
                _task(goal, offset, "Weekly Mock / Past Paper", "Full timed practice. Grade & review.", 40, "exam")
            )
    return _result("examStudy", streaks, schedule, "Exam blueprint applied")


def make_instrument(goal: GoalInput) -> PlanResult:
    days = plan_days(goal, "instrument")
    streaks = (
        StreakTaskSpec("Technique Drills (15m)", "Scales/arpeggios/etudes. Slow metronome.", 20, True),
        StreakTaskSpec("Repertoire (15m)", "Work on 1-2 pieces, bars/phrases.", 20, True),
    )
    schedule = [
        _task(goal, offset, "Theory & Ear (30m)", "Intervals, chords, transcription.", 30, "music")
        for offset in range(days + 1)
        if offset % 7 in (1, 4)
    ]
    return _result("instrument", streaks, schedule, "Instrument blueprint applied")


def make_coding(goal: GoalInput) -> PlanResult:
    days = plan_days(goal, "coding")
    streaks = (
        StreakTaskSpec("Daily Coding (30m)", "Implement/Refactor feature; commit daily.", 25, True),
        StreakTaskSpec("Notes/Flashcards (10m)", "Summarize concept learned.", 15, True),
    )
    schedule = [
        _task(goal, offset, "Project Milestone", "Ship a small feature or module.", 35, "coding")
        for offset in range(days + 1)
        if offset % 7 in (2, 5)
    ]
    return _result("coding", streaks, schedule, "Coding blueprint applied")


def make_money_online(goal: GoalInput) -> PlanResult:
    days = plan_days(goal, "moneyOnline")
    streaks = (
        StreakTaskSpec(
            "Daily Output (1 micro-asset)",
            "Publish 1 concrete thing: post, listing, landing, cold DM.",
            30,
            True,
        ),
        StreakTaskSpec("Metrics Log (5m)", "Track impressions, clicks, leads, revenue.", 10, True),
    )
    schedule: List[ScheduledTask] = []
    for offset in range(days + 1):
        if offset < 7:
            schedule.append(
                _task(goal, offset, "Niche & Offer Research", "Validate 3 problems. Draft 1 irresistible offer.", 40, "biz")
            )
        elif offset < 14:
            schedule.append(
                _task(goal, offset, "Setup Channel", "Pick 1 channel (shop, newsletter, SM). Ship MVP page.", 40, "biz")
            )
        else:
            if offset % 7 in (1, 4):
                schedule.append(
                    _task(goal, offset, "Distribution Sprint", "Outreach/ads/collabs. 10 reachouts minimum.", 40, "biz")
                )
            if offset % 7 == 6:
                schedule.append(
                    _task(goal, offset, "Weekly Optimization", "Review metrics/KPIs. Tweak offer or creative.", 35, "biz")
                )
    return _result("moneyOnline", streaks, schedule, "Business blueprint applied")


def make_generic(goal: GoalInput) -> PlanResult:
    days = plan_days(goal, "generic")
    streaks = (
        StreakTaskSpec("Daily Progress (25-40m)", "Small, verifiable action toward the goal.", 25, True),
        StreakTaskSpec("Journal (5m)", "What moved the needle? What next?", 10, False),
    )
    schedule = [
        _task(goal, offset, "Checkpoint", "Assess progress, set next micro-milestone.", 30, "generic")
        for offset in range(days + 1)
        if offset % 7 == 3
    ]
    return _result("generic", streaks, schedule, "Generic blueprint applied")


BLUEPRINTS: Dict[str, Blueprint] = {
    "language": make_language,
    "muscle": make_muscle,
    "examStudy": make_exam_study,
    "instrument": make_instrument,
    "coding": make_coding,
    "moneyOnline": make_money_online,
    "generic": make_generic,
}
