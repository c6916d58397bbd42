"""Tests for the height, activity, heart-rate and nutrition screens."""

from __future__ import annotations

import asyncio

import pytest

from conftest import FIXED_NOW
from hov.domains.health.errors import HealthStoreError
from hov.domains.health.screens.activity import ActivityScreen
from hov.domains.health.screens.base import LOAD_FAILED, SAVE_FAILED
from hov.domains.health.screens.heart_rate import NO_HEART_RATE_DATA, HeartRateScreen
from hov.domains.health.screens.height import HeightScreen
from hov.domains.health.screens.nutrition import INVALID_INPUT, NutritionScreen, parse_amount
from hov.domains.health.store import Scope


def _run(coro):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _load(screen_cls, store, clock, **kwargs):
    """Construct a screen on a fresh loop, load it and record every published write."""
    async def _go():
        screen = screen_cls(store, clock=clock, **kwargs)
        events = []
        screen.state.subscribe(lambda name, value: events.append((name, value)))
        ok = await screen.load()
        await screen.context.drain()
        return screen, ok, events
    return _run(_go())


class TestLoadingProtocol:
    def test_success_sequence(self, populated_store, clock):
        _, ok, events = _load(HeightScreen, populated_store, clock)
        assert ok is True
        assert events == [
            ("is_loading", True),
            ("error_message", None),
            ("success_message", None),
            ("is_loading", False),
            ("success_message", "Height data loaded successfully!"),
        ]

    def test_failure_sequence(self, authorized_store, clock):
        authorized_store.fail_queries(Scope.HEIGHT, HealthStoreError("database locked"))
        screen, ok, events = _load(HeightScreen, authorized_store, clock)
        assert ok is False
        assert events[-2:] == [
            ("is_loading", False),
            ("error_message", f"{LOAD_FAILED}: database locked"),
        ]
        assert screen.state.success_message is None
        assert screen.state.is_loading is False

    def test_messages_cleared_on_next_operation(self, authorized_store, clock):
        async def _go():
            screen = HeightScreen(authorized_store, clock=clock)
            authorized_store.fail_queries(Scope.HEIGHT, HealthStoreError("boom"))
            await screen.load()
            authorized_store.fail_queries(Scope.HEIGHT, None)
            await screen.load()
            await screen.context.drain()
            return screen.state.error_message

        assert _run(_go()) is None

    def test_screens_do_not_share_state(self, populated_store, clock):
        async def _go():
            first = HeightScreen(populated_store, clock=clock)
            second = HeightScreen(populated_store, clock=clock)
            await first.load()
            await first.context.drain()
            return first.state.success_message, second.state.success_message

        assert _run(_go()) == ("Height data loaded successfully!", None)


class TestHeightScreen:
    def test_loaded(self, populated_store, clock):
        screen, _, _ = _load(HeightScreen, populated_store, clock)
        assert screen.height.value_cm == pytest.approx(175.5)

    def test_no_height_is_not_an_error(self, authorized_store, clock):
        screen, ok, _ = _load(HeightScreen, authorized_store, clock)
        assert ok is True
        assert screen.height is None
        assert screen.state.error_message is None
        assert screen.state.success_message is None


class TestActivityScreen:
    def test_loaded_with_progress(self, populated_store, clock):
        screen, ok, _ = _load(ActivityScreen, populated_store, clock)
        assert ok is True
        assert (screen.activity.steps, screen.activity.floors) == (7300, 7)
        assert screen.steps_progress == pytest.approx(0.73)
        assert screen.floors_progress == pytest.approx(0.7)
        assert screen.motivation == "keep_going"
        assert screen.state.success_message == "Activity data loaded successfully!"

    def test_custom_goals(self, populated_store, clock):
        screen, _, _ = _load(ActivityScreen, populated_store, clock, step_goal=7000, floor_goal=5)
        assert screen.steps_progress == 1.0
        assert screen.motivation == "all_goals"

    def test_failure_has_no_partial_result(self, populated_store, clock):
        populated_store.fail_queries(Scope.FLIGHTS_CLIMBED, HealthStoreError("floors failed"))
        screen, ok, _ = _load(ActivityScreen, populated_store, clock)
        assert ok is False
        assert screen.activity is None
        assert screen.motivation is None
        assert screen.steps_progress == 0.0
        assert screen.state.error_message == f"{LOAD_FAILED}: floors failed"


class TestHeartRateScreen:
    def test_loaded(self, populated_store, clock):
        screen, ok, _ = _load(HeartRateScreen, populated_store, clock)
        assert ok is True
        assert screen.summary().average == pytest.approx(72.0)
        assert screen.state.success_message == "Heart rate data loaded successfully!"

    def test_empty_week_sets_guidance(self, authorized_store, clock):
        screen, ok, _ = _load(HeartRateScreen, authorized_store, clock)
        assert ok is True
        assert screen.samples == []
        assert screen.state.error_message == NO_HEART_RATE_DATA
        assert screen.summary().count == 0


class TestParseAmount:
    @pytest.mark.parametrize(
        "text,expected",
        [("500", 500.0), (" 25.5 ", 25.5), ("0", 0.0), ("", None), ("abc", None), ("nan", None)],
    )
    def test_parse(self, text, expected):
        assert parse_amount(text) == expected

    def test_form_validity(self):
        assert NutritionScreen.is_form_valid("500", "25")
        assert not NutritionScreen.is_form_valid("500", "")


class TestNutritionScreen:
    def _save(self, store, clock, *forms):
        async def _go():
            screen = NutritionScreen(store, clock=clock)
            results = [await screen.save(calories, protein) for calories, protein in forms]
            await screen.context.drain()
            return screen, results
        return _run(_go())

    def test_save_logs_entry(self, authorized_store, clock):
        screen, results = self._save(authorized_store, clock, ("500", "25"))
        assert results == [True]
        assert screen.state.success_message == "Nutrition data saved successfully!"
        assert len(screen.entries) == 1
        assert screen.entries[0].timestamp == FIXED_NOW
        assert screen.totals() == (500, 25.0)

    def test_invalid_input_never_reaches_store(self, authorized_store, clock):
        screen, results = self._save(authorized_store, clock, ("abc", "25"))
        assert results == [False]
        assert screen.state.error_message == INVALID_INPUT
        assert "save" not in [name for name, _ in authorized_store.calls]
        assert screen.entries == []

    def test_failed_write_is_not_logged(self, authorized_store, clock):
        authorized_store.fail_saves(HealthStoreError("store unavailable"))
        screen, results = self._save(authorized_store, clock, ("500", "25"))
        assert results == [False]
        assert screen.entries == []
        assert screen.state.error_message == f"{SAVE_FAILED}: store unavailable"

    def test_recent_entries_newest_first(self, authorized_store, clock):
        screen, _ = self._save(
            authorized_store, clock, ("100", "1"), ("200", "2"), ("300", "3"), ("400", "4")
        )
        assert [e.calories_kcal for e in screen.recent_entries()] == [400, 300, 200]
        assert screen.totals() == (1000, 10.0)
