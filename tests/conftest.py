"""Shared test fixtures for Health Overview tests."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HEALTH_STORE_BACKEND", "simulated")
    monkeypatch.setenv("HEALTH_FIXTURE_PATH", "")
    monkeypatch.setenv("APPLE_HEALTH_EXPORT_PATH", "")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from hov.domains.health.domain_logic.models import READ_SCOPES, WRITE_SCOPES  # noqa: E402
from hov.domains.health.store import (  # noqa: E402
    Quantity,
    QuantitySample,
    Scope,
    Unit,
)
from hov.domains.health.store.simulated import SimulatedHealthStore  # noqa: E402

# A fixed afternoon so "today" always has a few hours behind it.
FIXED_NOW = datetime(2026, 3, 10, 15, 30, tzinfo=timezone(timedelta(hours=9)))


def make_sample(
    scope: Scope,
    value: float,
    unit: Unit,
    start: datetime,
    end: datetime | None = None,
) -> QuantitySample:
    """Create a quantity sample with sensible defaults."""
    return QuantitySample(
        scope=scope,
        quantity=Quantity(value, unit),
        start=start,
        end=end or start,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock():
    """Clock returning FIXED_NOW, for facades and screens."""
    return lambda: FIXED_NOW


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store():
    """An empty simulated store with nothing authorized yet."""
    s = SimulatedHealthStore()
    yield s
    s.close()


@pytest.fixture
def authorized_store(store: SimulatedHealthStore) -> SimulatedHealthStore:
    """A simulated store with every required scope authorized."""
    store.authorize_all(READ_SCOPES | WRITE_SCOPES)
    return store


@pytest.fixture
def populated_store(authorized_store: SimulatedHealthStore) -> SimulatedHealthStore:
    """Authorized store with height, activity and heart-rate data around FIXED_NOW."""
    today = FIXED_NOW.replace(hour=0, minute=0)
    authorized_store.add_samples([
        make_sample(Scope.HEIGHT, 1.70, Unit.METER, FIXED_NOW - timedelta(days=200)),
        make_sample(Scope.HEIGHT, 175.5, Unit.CENTIMETER, FIXED_NOW - timedelta(days=30)),
        # Yesterday: outside today's window
        make_sample(Scope.STEP_COUNT, 9000, Unit.COUNT, today - timedelta(hours=2)),
        make_sample(Scope.STEP_COUNT, 4200, Unit.COUNT, today + timedelta(hours=8)),
        make_sample(Scope.STEP_COUNT, 3100, Unit.COUNT, today + timedelta(hours=12)),
        make_sample(Scope.FLIGHTS_CLIMBED, 4, Unit.COUNT, today + timedelta(hours=9)),
        make_sample(Scope.FLIGHTS_CLIMBED, 3, Unit.COUNT, today + timedelta(hours=13)),
        make_sample(Scope.HEART_RATE, 72, Unit.COUNT_PER_MINUTE, FIXED_NOW - timedelta(days=1)),
        make_sample(Scope.HEART_RATE, 64, Unit.COUNT_PER_MINUTE, FIXED_NOW - timedelta(days=5)),
        make_sample(Scope.HEART_RATE, 80, Unit.COUNT_PER_MINUTE, FIXED_NOW - timedelta(hours=3)),
        # Eight days ago: outside the weekly window
        make_sample(Scope.HEART_RATE, 150, Unit.COUNT_PER_MINUTE, FIXED_NOW - timedelta(days=8)),
    ])
    return authorized_store
