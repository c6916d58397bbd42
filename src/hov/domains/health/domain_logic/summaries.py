"""Derived statistics shown alongside fetched records.

Small, same-day or same-week reductions only: averages, extremes, goal
progress. Nothing here talks to a store.
"""

from __future__ import annotations

import statistics
from dataclasses import dataclass
from typing import Iterable

from hov.domains.health.domain_logic.models import (
    ActivitySample,
    HeartRateSample,
    NutritionEntry,
)

# Defaults for the activity goals (overridable through Settings)
DEFAULT_STEP_GOAL = 10_000
DEFAULT_FLOOR_GOAL = 10

# Chart range used when there is nothing to plot
DEFAULT_BPM_RANGE = (60.0, 100.0)
CHART_PADDING_RATIO = 0.15

# Heart-rate zone bounds (bpm)
NORMAL_BPM_LOW = 60.0
NORMAL_BPM_HIGH = 100.0
ELEVATED_BPM_HIGH = 120.0


@dataclass(frozen=True)
class HeartRateSummary:
    average: float
    maximum: float
    minimum: float
    count: int
    zone: str
    chart_range: tuple[float, float]


def heart_rate_zone(average_bpm: float) -> str:
    """Classify an average heart rate: low, normal, elevated or high."""
    if average_bpm < NORMAL_BPM_LOW:
        return "low"
    if average_bpm <= NORMAL_BPM_HIGH:
        return "normal"
    if average_bpm <= ELEVATED_BPM_HIGH:
        return "elevated"
    return "high"


def chart_range(values: list[float]) -> tuple[float, float]:
    """Y-axis range with 15% padding on both sides of the data."""
    if not values:
        return DEFAULT_BPM_RANGE
    low, high = min(values), max(values)
    padding = (high - low) * CHART_PADDING_RATIO
    return (low - padding, high + padding)


def summarize_heart_rate(samples: Iterable[HeartRateSample]) -> HeartRateSummary:
    """Average, max and min bpm; all zero for an empty series."""
    values = [s.bpm for s in samples]
    if not values:
        return HeartRateSummary(0.0, 0.0, 0.0, 0, heart_rate_zone(0.0), DEFAULT_BPM_RANGE)
    average = statistics.mean(values)
    return HeartRateSummary(
        average=average,
        maximum=max(values),
        minimum=min(values),
        count=len(values),
        zone=heart_rate_zone(average),
        chart_range=chart_range(values),
    )


def goal_progress(value: float, goal: float) -> float:
    """Fraction of ``goal`` reached, capped at 1.0."""
    if goal <= 0:
        return 1.0
    return min(value / goal, 1.0)


def goal_achieved(value: float, goal: float) -> bool:
    return value >= goal


def motivation(
    activity: ActivitySample,
    *,
    step_goal: float = DEFAULT_STEP_GOAL,
    floor_goal: float = DEFAULT_FLOOR_GOAL,
) -> str:
    """Which goals today's activity met: all_goals, steps_goal, floors_goal or keep_going."""
    steps_met = activity.steps >= step_goal
    floors_met = activity.floors >= floor_goal
    if steps_met and floors_met:
        return "all_goals"
    if steps_met:
        return "steps_goal"
    if floors_met:
        return "floors_goal"
    return "keep_going"


MOTIVATION_MESSAGES = {
    "all_goals": "Great job! You reached all of today's goals!",
    "steps_goal": "Step goal reached! Try a few more flights of stairs.",
    "floors_goal": "Stair goal reached! Try to add some more steps.",
    "keep_going": "Keep moving! You're not far from your goals.",
}


def nutrition_totals(entries: Iterable[NutritionEntry]) -> tuple[int, float]:
    """Total calories (each entry truncated to whole kcal) and total protein in grams."""
    calories = 0
    protein = 0.0
    for entry in entries:
        calories += int(entry.calories_kcal)
        protein += entry.protein_grams
    return calories, protein
