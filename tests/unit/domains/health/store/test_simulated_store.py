"""Tests for the store types and the SimulatedHealthStore."""

from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from conftest import FIXED_NOW, make_sample
from hov.domains.health.errors import HealthStoreError
from hov.domains.health.store import (
    AuthorizationStatus,
    DateRangePredicate,
    IncompatibleUnitError,
    Quantity,
    SampleQuery,
    Scope,
    StatisticsQuery,
    Unit,
)


class _Waiter:
    """Collects one completion call from a worker thread."""

    def __init__(self):
        self._event = threading.Event()
        self.args = None
        self.thread = None

    def __call__(self, *args):
        self.args = args
        self.thread = threading.get_ident()
        self._event.set()

    def wait(self):
        assert self._event.wait(timeout=5), "completion was never called"
        return self.args


class TestUnits:
    def test_length_conversion(self):
        assert Quantity(1.75, Unit.METER).value_in(Unit.CENTIMETER) == pytest.approx(175.0)
        assert Quantity(70, Unit.INCH).value_in(Unit.CENTIMETER) == pytest.approx(177.8)

    def test_energy_and_mass(self):
        assert Quantity(4.184, Unit.KILOJOULE).value_in(Unit.KILOCALORIE) == pytest.approx(1.0)
        assert Quantity(1, Unit.POUND).value_in(Unit.GRAM) == pytest.approx(453.59237)

    def test_incompatible_dimensions(self):
        with pytest.raises(IncompatibleUnitError):
            Quantity(10, Unit.COUNT).value_in(Unit.CENTIMETER)

    def test_parse_aliases(self):
        assert Unit.parse("count/min") is Unit.COUNT_PER_MINUTE
        assert Unit.parse("Cal") is Unit.KILOCALORIE
        with pytest.raises(ValueError):
            Unit.parse("furlong")


class TestScope:
    def test_parse_identifier_and_short_name(self):
        assert Scope.parse("step_count") is Scope.STEP_COUNT
        assert Scope.parse("HKQuantityTypeIdentifierHeartRate") is Scope.HEART_RATE

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown scope"):
            Scope.parse("blood_glucose")


class TestDateRangePredicate:
    def test_strict_start_half_open(self):
        predicate = DateRangePredicate(FIXED_NOW - timedelta(hours=1), FIXED_NOW)
        at_start = make_sample(Scope.STEP_COUNT, 1, Unit.COUNT, FIXED_NOW - timedelta(hours=1))
        at_end = make_sample(Scope.STEP_COUNT, 1, Unit.COUNT, FIXED_NOW)
        # Started before the window even though it ends inside it
        straddling = make_sample(
            Scope.STEP_COUNT, 1, Unit.COUNT,
            FIXED_NOW - timedelta(hours=2), FIXED_NOW - timedelta(minutes=30),
        )
        assert predicate.matches(at_start)
        assert not predicate.matches(at_end)
        assert not predicate.matches(straddling)


class TestQueries:
    def test_completion_runs_on_worker_thread(self, populated_store):
        waiter = _Waiter()
        populated_store.query_samples(SampleQuery(scope=Scope.HEIGHT), waiter)
        waiter.wait()
        assert waiter.thread != threading.get_ident()

    def test_sample_query_sort_and_limit(self, populated_store):
        waiter = _Waiter()
        populated_store.query_samples(
            SampleQuery(scope=Scope.HEIGHT, limit=1, ascending=False), waiter
        )
        samples, error = waiter.wait()
        assert error is None
        assert len(samples) == 1
        assert samples[0].quantity == Quantity(175.5, Unit.CENTIMETER)

    def test_statistics_sum_in_canonical_unit(self, populated_store):
        today = FIXED_NOW.replace(hour=0, minute=0)
        waiter = _Waiter()
        populated_store.query_statistics(
            StatisticsQuery(Scope.STEP_COUNT, DateRangePredicate(today, FIXED_NOW)), waiter
        )
        statistics, error = waiter.wait()
        assert error is None
        assert statistics.sum_quantity == Quantity(7300, Unit.COUNT)

    def test_statistics_without_matches_has_no_sum(self, authorized_store):
        waiter = _Waiter()
        authorized_store.query_statistics(
            StatisticsQuery(
                Scope.FLIGHTS_CLIMBED,
                DateRangePredicate(FIXED_NOW - timedelta(days=1), FIXED_NOW),
            ),
            waiter,
        )
        statistics, error = waiter.wait()
        assert error is None
        assert statistics.sum_quantity is None

    def test_injected_query_failure(self, authorized_store):
        authorized_store.fail_queries(Scope.HEART_RATE, HealthStoreError("database locked"))
        waiter = _Waiter()
        authorized_store.query_samples(SampleQuery(scope=Scope.HEART_RATE), waiter)
        samples, error = waiter.wait()
        assert samples is None
        assert str(error) == "database locked"


class TestWorkerFailures:
    """An exception inside a worker still completes the call exactly once."""

    def test_statistics_over_incompatible_sample(self, authorized_store):
        authorized_store.add_samples([
            make_sample(Scope.STEP_COUNT, 10, Unit.CENTIMETER, FIXED_NOW - timedelta(hours=1)),
        ])
        waiter = _Waiter()
        authorized_store.query_statistics(
            StatisticsQuery(
                Scope.STEP_COUNT, DateRangePredicate(FIXED_NOW - timedelta(days=1), FIXED_NOW)
            ),
            waiter,
        )
        statistics, error = waiter.wait()
        assert statistics is None
        assert isinstance(error, IncompatibleUnitError)

    def test_sample_query_over_naive_timestamp(self, authorized_store):
        naive = FIXED_NOW.replace(tzinfo=None) - timedelta(hours=1)
        authorized_store.add_samples([make_sample(Scope.HEART_RATE, 70, Unit.COUNT_PER_MINUTE, naive)])
        waiter = _Waiter()
        authorized_store.query_samples(
            SampleQuery(
                scope=Scope.HEART_RATE,
                predicate=DateRangePredicate(FIXED_NOW - timedelta(days=7), FIXED_NOW),
            ),
            waiter,
        )
        samples, error = waiter.wait()
        assert samples is None
        assert isinstance(error, TypeError)

    def test_save_failure_reports_false(self, authorized_store, monkeypatch):
        def broken(samples, completion):
            raise RuntimeError("disk gone")

        monkeypatch.setattr(authorized_store, "_run_save", broken)
        waiter = _Waiter()
        authorized_store.save([make_sample(Scope.DIETARY_PROTEIN, 25, Unit.GRAM, FIXED_NOW)], waiter)
        success, error = waiter.wait()
        assert success is False
        assert str(error) == "disk gone"


class TestAuthorization:
    def test_statuses_default_to_not_determined(self, store):
        assert store.authorization_status(Scope.HEIGHT) is AuthorizationStatus.NOT_DETERMINED

    def test_request_applies_decisions_and_reports_success(self, store):
        store.set_authorization_decisions({Scope.HEART_RATE: AuthorizationStatus.SHARING_DENIED})
        waiter = _Waiter()
        store.request_authorization({Scope.DIETARY_PROTEIN}, {Scope.HEART_RATE, Scope.HEIGHT}, waiter)
        assert waiter.wait() == (True, None)
        assert store.authorization_status(Scope.HEART_RATE) is AuthorizationStatus.SHARING_DENIED
        assert store.authorization_status(Scope.HEIGHT) is AuthorizationStatus.SHARING_AUTHORIZED
        assert store.authorization_status(Scope.DIETARY_PROTEIN) is (
            AuthorizationStatus.SHARING_AUTHORIZED
        )

    def test_answered_scopes_are_not_prompted_again(self, store):
        store.set_status(Scope.HEIGHT, AuthorizationStatus.SHARING_DENIED)
        waiter = _Waiter()
        store.request_authorization(set(), {Scope.HEIGHT}, waiter)
        waiter.wait()
        assert store.authorization_status(Scope.HEIGHT) is AuthorizationStatus.SHARING_DENIED


class TestSave:
    def test_save_requires_share_authorization(self, store):
        sample = make_sample(Scope.DIETARY_PROTEIN, 25, Unit.GRAM, FIXED_NOW)
        waiter = _Waiter()
        store.save([sample], waiter)
        success, error = waiter.wait()
        assert success is False
        assert isinstance(error, HealthStoreError)
        assert store.samples_for(Scope.DIETARY_PROTEIN) == []

    def test_batch_is_all_or_nothing(self, store):
        store.set_status(Scope.DIETARY_ENERGY_CONSUMED, AuthorizationStatus.SHARING_AUTHORIZED)
        samples = [
            make_sample(Scope.DIETARY_ENERGY_CONSUMED, 500, Unit.KILOCALORIE, FIXED_NOW),
            make_sample(Scope.DIETARY_PROTEIN, 25, Unit.GRAM, FIXED_NOW),
        ]
        waiter = _Waiter()
        store.save(samples, waiter)
        success, _ = waiter.wait()
        assert success is False
        assert store.samples_for(Scope.DIETARY_ENERGY_CONSUMED) == []

    def test_rejects_wrong_unit(self, authorized_store):
        waiter = _Waiter()
        authorized_store.save(
            [make_sample(Scope.DIETARY_PROTEIN, 25, Unit.KILOCALORIE, FIXED_NOW)], waiter
        )
        success, error = waiter.wait()
        assert success is False
        assert "not valid" in str(error)

    def test_calls_are_recorded(self, authorized_store):
        authorized_store.is_health_data_available()
        authorized_store.authorization_status(Scope.HEIGHT)
        names = [name for name, _ in authorized_store.calls]
        assert names == ["is_health_data_available", "authorization_status"]
