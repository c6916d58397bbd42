"""Typed health records and the fixed set of required scopes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from hov.domains.health.store import Scope, Unit


# ---------------------------------------------------------------------------
# Required scopes (fixed, not configurable)
# ---------------------------------------------------------------------------

READ_SCOPES: frozenset[Scope] = frozenset({
    Scope.HEIGHT,
    Scope.STEP_COUNT,
    Scope.FLIGHTS_CLIMBED,
    Scope.HEART_RATE,
})

WRITE_SCOPES: frozenset[Scope] = frozenset({
    Scope.DIETARY_ENERGY_CONSUMED,
    Scope.DIETARY_PROTEIN,
})

# Checked in this order; the gate stops at the first scope that is not authorized.
READ_SCOPE_ORDER = [Scope.HEIGHT, Scope.STEP_COUNT, Scope.FLIGHTS_CLIMBED, Scope.HEART_RATE]
WRITE_SCOPE_ORDER = [Scope.DIETARY_ENERGY_CONSUMED, Scope.DIETARY_PROTEIN]

HEART_RATE_UNIT = Unit.COUNT_PER_MINUTE
HEART_RATE_WINDOW_DAYS = 7


# ---------------------------------------------------------------------------
# Records (built fresh on every fetch, never persisted)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HeightSample:
    value_cm: float


@dataclass(frozen=True)
class ActivitySample:
    """Cumulative totals since the start of the local day."""

    steps: float
    floors: float


@dataclass(frozen=True)
class HeartRateSample:
    timestamp: datetime
    bpm: float


@dataclass(frozen=True)
class NutritionWriteRequest:
    """Two point-in-time samples (energy and protein) sharing one instant."""

    calories_kcal: float
    protein_grams: float
    timestamp: datetime


@dataclass(frozen=True)
class NutritionEntry:
    """One successful nutrition write, kept only for the current session."""

    calories_kcal: float
    protein_grams: float
    timestamp: datetime

    @classmethod
    def from_request(cls, request: NutritionWriteRequest) -> NutritionEntry:
        return cls(request.calories_kcal, request.protein_grams, request.timestamp)
