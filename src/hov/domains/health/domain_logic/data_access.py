"""Data access facade: typed reads and writes against a HealthStore.

Each operation issues one store call (two for the activity join and the
nutrition batch) and maps the raw result into a record from
``domain_logic.models``. Absence of data is a value, never an error:
``None`` height, ``0.0`` sums, an empty heart-rate list.

The facade does not check authorization before querying; the store
enforces it. It does check availability and fails fast without contacting
the store when health data is unavailable.
"""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import datetime, timedelta
from typing import Callable

from hov.core.dispatch.completion import CompletionBridge
from hov.domains.health.domain_logic.models import (
    HEART_RATE_UNIT,
    HEART_RATE_WINDOW_DAYS,
    ActivitySample,
    HeartRateSample,
    HeightSample,
    NutritionWriteRequest,
)
from hov.domains.health.domain_logic.permission_gate import PermissionGate
from hov.domains.health.errors import HealthDataUnavailableError, WriteRejectedError
from hov.domains.health.store import (
    DateRangePredicate,
    HealthStore,
    Quantity,
    QuantitySample,
    Sample,
    SampleQuery,
    Scope,
    Statistics,
    StatisticsQuery,
    Unit,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def local_now() -> datetime:
    """Timezone-aware current local time."""
    return datetime.now().astimezone()


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


class HealthDataFacade:
    """Translates read/write intents into store queries and typed results.

    Usage::

        facade = HealthDataFacade(store, gate)
        activity = await facade.fetch_today_activity_data()
        await facade.save_nutrition_data(calories=500, protein=25)
    """

    def __init__(
        self,
        store: HealthStore,
        gate: PermissionGate,
        *,
        clock: Clock = local_now,
    ) -> None:
        self._store = store
        self._gate = gate
        self._clock = clock

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def fetch_height(self) -> HeightSample | None:
        """Most recent height sample in centimeters, or None if there is none."""
        self._ensure_available()
        query = SampleQuery(scope=Scope.HEIGHT, predicate=None, limit=1, ascending=False)
        samples = await self._query_samples(query)
        latest = samples[0] if samples else None
        if not isinstance(latest, QuantitySample):
            return None
        return HeightSample(value_cm=latest.quantity.value_in(Unit.CENTIMETER))

    async def fetch_sum(self, scope: Scope, unit: Unit, start: datetime, end: datetime) -> float:
        """Cumulative sum of ``scope`` over ``[start, end)`` in ``unit``; 0.0 if empty."""
        self._ensure_available()
        query = StatisticsQuery(scope=scope, predicate=DateRangePredicate(start, end))
        bridge: CompletionBridge[Statistics | None] = CompletionBridge(
            asyncio.get_running_loop(), f"sum:{scope.short_name}"
        )
        logger.debug("Statistics query %s [%s, %s)", scope.short_name, start, end)
        self._store.query_statistics(query, bridge.settle)
        statistics = await bridge.future
        if statistics is None or statistics.sum_quantity is None:
            return 0.0
        return statistics.sum_quantity.value_in(unit)

    async def fetch_today_steps(self) -> float:
        start, end = self._today_window()
        return await self.fetch_sum(Scope.STEP_COUNT, Unit.COUNT, start, end)

    async def fetch_today_floors(self) -> float:
        start, end = self._today_window()
        return await self.fetch_sum(Scope.FLIGHTS_CLIMBED, Unit.COUNT, start, end)

    async def fetch_weekly_heart_rate(self) -> list[HeartRateSample]:
        """Heart-rate samples from the trailing seven days, oldest first."""
        self._ensure_available()
        end = self._clock()
        start = end - timedelta(days=HEART_RATE_WINDOW_DAYS)
        query = SampleQuery(
            scope=Scope.HEART_RATE,
            predicate=DateRangePredicate(start, end),
            limit=None,
            ascending=True,
        )
        samples = await self._query_samples(query)
        results = []
        for sample in samples:
            if not isinstance(sample, QuantitySample):
                continue
            if not sample.quantity.is_compatible(HEART_RATE_UNIT):
                continue
            results.append(
                HeartRateSample(timestamp=sample.start, bpm=sample.quantity.value_in(HEART_RATE_UNIT))
            )
        return results

    async def fetch_today_activity_data(self) -> ActivitySample:
        """Today's steps and floors, fetched concurrently and joined.

        Fails with the first error from either query; no partial result.
        """
        self._ensure_available()
        start, end = self._today_window()
        tasks = [
            asyncio.ensure_future(self.fetch_sum(Scope.STEP_COUNT, Unit.COUNT, start, end)),
            asyncio.ensure_future(self.fetch_sum(Scope.FLIGHTS_CLIMBED, Unit.COUNT, start, end)),
        ]
        try:
            steps, floors = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise
        return ActivitySample(steps=steps, floors=floors)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def save_nutrition_data(self, calories: float, protein: float) -> NutritionWriteRequest:
        """Write energy (kcal) and protein (g) as one batch at a single instant.

        Raises:
            ValueError: A value is negative or not finite; nothing is written.
            WriteRejectedError: The store reported failure without an error.
        """
        for name, value in (("calories", calories), ("protein", protein)):
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be a non-negative number, got {value!r}")
        self._ensure_available()

        now = self._clock()
        request = NutritionWriteRequest(
            calories_kcal=float(calories), protein_grams=float(protein), timestamp=now
        )
        samples = [
            QuantitySample(
                scope=Scope.DIETARY_ENERGY_CONSUMED,
                quantity=Quantity(request.calories_kcal, Unit.KILOCALORIE),
                start=now,
                end=now,
            ),
            QuantitySample(
                scope=Scope.DIETARY_PROTEIN,
                quantity=Quantity(request.protein_grams, Unit.GRAM),
                start=now,
                end=now,
            ),
        ]

        bridge: CompletionBridge[None] = CompletionBridge(
            asyncio.get_running_loop(), "save_nutrition"
        )

        def completion(success: bool, error: Exception | None) -> None:
            if error is not None:
                bridge.reject(error)
            elif not success:
                bridge.reject(WriteRejectedError())
            else:
                bridge.resolve(None)

        self._store.save(samples, completion)
        await bridge.future
        logger.info("Saved nutrition: %.0f kcal, %.1f g protein", calories, protein)
        return request

    # ------------------------------------------------------------------
    # Authorization + fetch
    # ------------------------------------------------------------------

    async def request_authorization_and_fetch_height(self) -> HeightSample | None:
        await self._gate.request_all_authorizations()
        return await self.fetch_height()

    async def request_authorization_and_fetch_activity(self) -> ActivitySample:
        await self._gate.request_all_authorizations()
        return await self.fetch_today_activity_data()

    async def request_authorization_and_fetch_heart_rate(self) -> list[HeartRateSample]:
        await self._gate.request_all_authorizations()
        return await self.fetch_weekly_heart_rate()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_available(self) -> None:
        if not self._store.is_health_data_available():
            raise HealthDataUnavailableError()

    def _today_window(self) -> tuple[datetime, datetime]:
        now = self._clock()
        return start_of_day(now), now

    async def _query_samples(self, query: SampleQuery) -> list[Sample]:
        bridge: CompletionBridge[list[Sample] | None] = CompletionBridge(
            asyncio.get_running_loop(), f"samples:{query.scope.short_name}"
        )
        logger.debug("Sample query %s (limit=%s)", query.scope.short_name, query.limit)
        self._store.query_samples(query, bridge.settle)
        return list(await bridge.future or [])
