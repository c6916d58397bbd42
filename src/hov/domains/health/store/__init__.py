"""Health store boundary — the platform health-data API the app talks to.

The app never owns health data. It asks a ``HealthStore`` for authorization,
runs sample and statistics queries against it, and saves samples into it.
Every asynchronous call takes a completion callback which the store may
invoke from any thread.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Protocol, Union, runtime_checkable


class Scope(str, enum.Enum):
    """Quantity type identifiers that need independent authorization."""

    HEIGHT = "HKQuantityTypeIdentifierHeight"
    STEP_COUNT = "HKQuantityTypeIdentifierStepCount"
    FLIGHTS_CLIMBED = "HKQuantityTypeIdentifierFlightsClimbed"
    HEART_RATE = "HKQuantityTypeIdentifierHeartRate"
    DIETARY_ENERGY_CONSUMED = "HKQuantityTypeIdentifierDietaryEnergyConsumed"
    DIETARY_PROTEIN = "HKQuantityTypeIdentifierDietaryProtein"

    @property
    def short_name(self) -> str:
        return _SHORT_NAMES[self]

    @classmethod
    def parse(cls, name: str) -> Scope:
        """Accept either the identifier or the short name (``step_count``)."""
        for scope in cls:
            if name in (scope.value, scope.short_name):
                return scope
        raise ValueError(f"Unknown scope: {name!r}")


_SHORT_NAMES = {
    Scope.HEIGHT: "height",
    Scope.STEP_COUNT: "step_count",
    Scope.FLIGHTS_CLIMBED: "flights_climbed",
    Scope.HEART_RATE: "heart_rate",
    Scope.DIETARY_ENERGY_CONSUMED: "dietary_energy_consumed",
    Scope.DIETARY_PROTEIN: "dietary_protein",
}


class AuthorizationStatus(str, enum.Enum):
    NOT_DETERMINED = "not_determined"
    SHARING_DENIED = "sharing_denied"
    SHARING_AUTHORIZED = "sharing_authorized"


# ---------------------------------------------------------------------------
# Units and quantities
# ---------------------------------------------------------------------------

class IncompatibleUnitError(ValueError):
    """Raised when converting between units of different dimensions."""


class Unit(str, enum.Enum):
    METER = "m"
    CENTIMETER = "cm"
    INCH = "in"
    FOOT = "ft"
    COUNT = "count"
    COUNT_PER_MINUTE = "count/min"
    KILOCALORIE = "kcal"
    KILOJOULE = "kJ"
    GRAM = "g"
    KILOGRAM = "kg"
    POUND = "lb"

    @classmethod
    def parse(cls, symbol: str) -> Unit:
        try:
            return cls(symbol)
        except ValueError:
            alias = _UNIT_ALIASES.get(symbol)
            if alias is None:
                raise ValueError(f"Unknown unit: {symbol!r}") from None
            return alias


# unit -> (dimension, factor to the dimension's base unit)
_UNIT_TABLE: dict[Unit, tuple[str, float]] = {
    Unit.METER: ("length", 1.0),
    Unit.CENTIMETER: ("length", 0.01),
    Unit.INCH: ("length", 0.0254),
    Unit.FOOT: ("length", 0.3048),
    Unit.COUNT: ("count", 1.0),
    Unit.COUNT_PER_MINUTE: ("frequency", 1.0),
    Unit.KILOCALORIE: ("energy", 1.0),
    Unit.KILOJOULE: ("energy", 1 / 4.184),
    Unit.GRAM: ("mass", 1.0),
    Unit.KILOGRAM: ("mass", 1000.0),
    Unit.POUND: ("mass", 453.59237),
}

_UNIT_ALIASES = {
    "Cal": Unit.KILOCALORIE,
    "bpm": Unit.COUNT_PER_MINUTE,
}


@dataclass(frozen=True)
class Quantity:
    value: float
    unit: Unit

    def value_in(self, unit: Unit) -> float:
        """Return the magnitude expressed in ``unit``."""
        src_dim, src_factor = _UNIT_TABLE[self.unit]
        dst_dim, dst_factor = _UNIT_TABLE[unit]
        if src_dim != dst_dim:
            raise IncompatibleUnitError(
                f"Cannot convert {self.unit.value} ({src_dim}) to {unit.value} ({dst_dim})"
            )
        return self.value * src_factor / dst_factor

    def is_compatible(self, unit: Unit) -> bool:
        return _UNIT_TABLE[self.unit][0] == _UNIT_TABLE[unit][0]


# ---------------------------------------------------------------------------
# Samples, predicates, queries
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class QuantitySample:
    scope: Scope
    quantity: Quantity
    start: datetime
    end: datetime


@dataclass(frozen=True)
class CategorySample:
    """A non-quantity record (e.g. an event marker) stored under a scope."""

    scope: Scope
    value: str
    start: datetime
    end: datetime


Sample = Union[QuantitySample, CategorySample]


@dataclass(frozen=True)
class DateRangePredicate:
    """Strict-start date predicate: ``start <= sample.start < end``."""

    start: datetime
    end: datetime

    def matches(self, sample: Sample) -> bool:
        return self.start <= sample.start < self.end


@dataclass(frozen=True)
class SampleQuery:
    scope: Scope
    predicate: DateRangePredicate | None = None
    limit: int | None = None  # None = no limit
    ascending: bool = True    # sorted by sample start date


@dataclass(frozen=True)
class StatisticsQuery:
    """Cumulative-sum statistics over quantity samples of one scope."""

    scope: Scope
    predicate: DateRangePredicate


@dataclass(frozen=True)
class Statistics:
    scope: Scope
    sum_quantity: Quantity | None  # None when nothing matched


BoolCompletion = Callable[[bool, "Exception | None"], None]
SamplesCompletion = Callable[["list[Sample] | None", "Exception | None"], None]
StatisticsCompletion = Callable[["Statistics | None", "Exception | None"], None]


@runtime_checkable
class HealthStore(Protocol):
    """Abstract interface for the platform health-data store.

    Callers never assume which thread a completion runs on.
    """

    def is_health_data_available(self) -> bool:
        """Whether health data exists at all on this device/build."""
        ...

    def request_authorization(
        self,
        to_share: set[Scope],
        read: set[Scope],
        completion: BoolCompletion,
    ) -> None:
        """Show the platform authorization prompt for the given scopes."""
        ...

    def authorization_status(self, scope: Scope) -> AuthorizationStatus:
        """Current authorization status for one scope."""
        ...

    def query_samples(self, query: SampleQuery, completion: SamplesCompletion) -> None:
        ...

    def query_statistics(
        self, query: StatisticsQuery, completion: StatisticsCompletion
    ) -> None:
        ...

    def save(self, samples: list[QuantitySample], completion: BoolCompletion) -> None:
        """Save all samples as one batch (all or nothing)."""
        ...
