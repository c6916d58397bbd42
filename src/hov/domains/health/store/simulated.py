"""In-process health store.

Behaves like the platform store from the app's point of view: queries run
on a worker thread and completions are invoked from that thread. Everything
lives in memory for the lifetime of the object; nothing is written to disk.

Tests and the development server script its behavior: seed samples, set
authorization statuses, decide how the "user" answers an authorization
prompt, and inject query or save failures.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Iterable

from hov.domains.health.errors import HealthStoreError
from hov.domains.health.store import (
    AuthorizationStatus,
    BoolCompletion,
    Quantity,
    QuantitySample,
    Sample,
    SampleQuery,
    SamplesCompletion,
    Scope,
    Statistics,
    StatisticsCompletion,
    StatisticsQuery,
    Unit,
)

logger = logging.getLogger(__name__)

# Unit the store reports cumulative sums in, per scope.
CANONICAL_UNITS: dict[Scope, Unit] = {
    Scope.HEIGHT: Unit.METER,
    Scope.STEP_COUNT: Unit.COUNT,
    Scope.FLIGHTS_CLIMBED: Unit.COUNT,
    Scope.HEART_RATE: Unit.COUNT_PER_MINUTE,
    Scope.DIETARY_ENERGY_CONSUMED: Unit.KILOCALORIE,
    Scope.DIETARY_PROTEIN: Unit.GRAM,
}


class SimulatedHealthStore:
    """HealthStore implementation backed by in-memory samples.

    Usage::

        store = SimulatedHealthStore(samples=samples)
        store.set_authorization_decisions({Scope.HEART_RATE: AuthorizationStatus.SHARING_DENIED})
        store.request_authorization(write_scopes, read_scopes, completion)
    """

    def __init__(
        self,
        *,
        available: bool = True,
        samples: Iterable[Sample] = (),
        statuses: dict[Scope, AuthorizationStatus] | None = None,
        authorization_decisions: dict[Scope, AuthorizationStatus] | None = None,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._available = available
        self._samples: list[Sample] = list(samples)
        self._statuses: dict[Scope, AuthorizationStatus] = dict(statuses or {})
        self._decisions: dict[Scope, AuthorizationStatus] = dict(authorization_decisions or {})
        self._query_failures: dict[Scope, Exception] = {}
        self._authorization_outcome: tuple[bool, Exception | None] | None = None
        self._save_outcome: tuple[bool, Exception | None] | None = None
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="health-store"
        )
        self.calls: list[tuple[str, Any]] = []

    # ------------------------------------------------------------------
    # Scripting
    # ------------------------------------------------------------------

    @property
    def available(self) -> bool:
        return self._available

    @available.setter
    def available(self, value: bool) -> None:
        self._available = value

    def add_samples(self, samples: Iterable[Sample]) -> None:
        with self._lock:
            self._samples.extend(samples)

    def samples_for(self, scope: Scope) -> list[Sample]:
        with self._lock:
            return [s for s in self._samples if s.scope == scope]

    def set_status(self, scope: Scope, status: AuthorizationStatus) -> None:
        with self._lock:
            self._statuses[scope] = status

    def authorize_all(self, scopes: Iterable[Scope]) -> None:
        for scope in scopes:
            self.set_status(scope, AuthorizationStatus.SHARING_AUTHORIZED)

    def set_authorization_decisions(self, decisions: dict[Scope, AuthorizationStatus]) -> None:
        """How the user answers the prompt, per scope. Unlisted scopes are granted."""
        with self._lock:
            self._decisions = dict(decisions)

    def fail_authorization(self, error: Exception | None = None, *, success: bool = False) -> None:
        """Make every following authorization request complete with this outcome."""
        self._authorization_outcome = (success, error)

    def fail_queries(self, scope: Scope, error: Exception) -> None:
        with self._lock:
            self._query_failures[scope] = error

    def fail_saves(self, error: Exception | None = None, *, success: bool = False) -> None:
        self._save_outcome = (success, error)

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> SimulatedHealthStore:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # HealthStore protocol
    # ------------------------------------------------------------------

    def is_health_data_available(self) -> bool:
        self.calls.append(("is_health_data_available", None))
        return self._available

    def request_authorization(
        self,
        to_share: set[Scope],
        read: set[Scope],
        completion: BoolCompletion,
    ) -> None:
        self.calls.append(("request_authorization", (frozenset(to_share), frozenset(read))))
        self._submit(self._answer_authorization, completion, False, set(to_share) | set(read))

    def authorization_status(self, scope: Scope) -> AuthorizationStatus:
        self.calls.append(("authorization_status", scope))
        with self._lock:
            return self._statuses.get(scope, AuthorizationStatus.NOT_DETERMINED)

    def query_samples(self, query: SampleQuery, completion: SamplesCompletion) -> None:
        self.calls.append(("query_samples", query))
        self._submit(self._run_sample_query, completion, None, query)

    def query_statistics(
        self, query: StatisticsQuery, completion: StatisticsCompletion
    ) -> None:
        self.calls.append(("query_statistics", query))
        self._submit(self._run_statistics_query, completion, None, query)

    def save(self, samples: list[QuantitySample], completion: BoolCompletion) -> None:
        self.calls.append(("save", list(samples)))
        self._submit(self._run_save, completion, False, list(samples))

    # ------------------------------------------------------------------
    # Worker-side execution
    # ------------------------------------------------------------------

    def _submit(
        self,
        work: Callable[..., None],
        completion: Callable[[Any, Exception | None], None],
        failed: Any,
        *args: Any,
    ) -> None:
        """Run ``work(*args, completion)`` on a worker; an exception becomes a failed completion."""

        def run() -> None:
            try:
                work(*args, completion)
            except Exception as exc:
                logger.exception("Health store %s failed", work.__name__)
                completion(failed, exc)

        self._executor.submit(run)

    def _answer_authorization(self, scopes: set[Scope], completion: BoolCompletion) -> None:
        if self._authorization_outcome is not None:
            success, error = self._authorization_outcome
            completion(success, error)
            return
        with self._lock:
            for scope in scopes:
                # The platform only prompts for scopes the user has not answered yet.
                if self._statuses.get(scope, AuthorizationStatus.NOT_DETERMINED) is not (
                    AuthorizationStatus.NOT_DETERMINED
                ):
                    continue
                self._statuses[scope] = self._decisions.get(
                    scope, AuthorizationStatus.SHARING_AUTHORIZED
                )
        # Success means "the prompt was handled", not "everything was granted".
        completion(True, None)

    def _run_sample_query(self, query: SampleQuery, completion: SamplesCompletion) -> None:
        failure = self._query_failures.get(query.scope)
        if failure is not None:
            completion(None, failure)
            return
        with self._lock:
            matched = [
                s for s in self._samples
                if s.scope == query.scope
                and (query.predicate is None or query.predicate.matches(s))
            ]
        matched.sort(key=lambda s: s.start, reverse=not query.ascending)
        if query.limit is not None:
            matched = matched[: query.limit]
        logger.debug("Sample query %s matched %d samples", query.scope.short_name, len(matched))
        completion(matched, None)

    def _run_statistics_query(
        self, query: StatisticsQuery, completion: StatisticsCompletion
    ) -> None:
        failure = self._query_failures.get(query.scope)
        if failure is not None:
            completion(None, failure)
            return
        unit = CANONICAL_UNITS[query.scope]
        with self._lock:
            matched = [
                s for s in self._samples
                if isinstance(s, QuantitySample)
                and s.scope == query.scope
                and query.predicate.matches(s)
            ]
        if not matched:
            completion(Statistics(scope=query.scope, sum_quantity=None), None)
            return
        total = sum(s.quantity.value_in(unit) for s in matched)
        completion(Statistics(scope=query.scope, sum_quantity=Quantity(total, unit)), None)

    def _run_save(self, samples: list[QuantitySample], completion: BoolCompletion) -> None:
        if self._save_outcome is not None:
            success, error = self._save_outcome
            completion(success, error)
            return
        with self._lock:
            for sample in samples:
                status = self._statuses.get(sample.scope, AuthorizationStatus.NOT_DETERMINED)
                if status is not AuthorizationStatus.SHARING_AUTHORIZED:
                    completion(
                        False,
                        HealthStoreError(
                            f"Not authorized to share {sample.scope.short_name}"
                        ),
                    )
                    return
                if not sample.quantity.is_compatible(CANONICAL_UNITS[sample.scope]):
                    completion(
                        False,
                        HealthStoreError(
                            f"Unit {sample.quantity.unit.value} is not valid "
                            f"for {sample.scope.short_name}"
                        ),
                    )
                    return
            self._samples.extend(samples)
        logger.debug("Saved %d samples", len(samples))
        completion(True, None)
