"""Fixture loader — seeds a SimulatedHealthStore from a YAML file.

Example fixture::

    available: true
    authorization:
      height: sharing_authorized
      heart_rate: not_determined
    authorization_decisions:
      heart_rate: sharing_denied
    samples:
      - {scope: height, value: 175.5, unit: cm, start: -30d}
      - {scope: step_count, value: 4200, unit: count, start: -2h, end: -1h}
      - {scope: heart_rate, value: 68, unit: count/min, start: "2026-02-01T08:00:00+00:00"}

``start``/``end`` accept ISO 8601 timestamps, ``now``, or an offset from
now such as ``-45m``, ``-2h`` or ``-3d``.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import yaml

from hov.domains.health.errors import FixtureError
from hov.domains.health.store import (
    AuthorizationStatus,
    Quantity,
    QuantitySample,
    Scope,
    Unit,
)
from hov.domains.health.store.simulated import CANONICAL_UNITS, SimulatedHealthStore

logger = logging.getLogger(__name__)

_OFFSET_RE = re.compile(r"^(?P<sign>[-+])(?P<amount>\d+(?:\.\d+)?)(?P<unit>[mhd])$")
_OFFSET_UNITS = {"m": "minutes", "h": "hours", "d": "days"}


def parse_timestamp(raw: Any, now: datetime) -> datetime:
    """Parse an absolute or now-relative fixture timestamp."""
    if isinstance(raw, datetime):
        return raw if raw.tzinfo else raw.replace(tzinfo=now.tzinfo)
    text = str(raw).strip()
    if text == "now":
        return now
    match = _OFFSET_RE.match(text)
    if match:
        amount = float(match.group("amount"))
        if match.group("sign") == "-":
            amount = -amount
        return now + timedelta(**{_OFFSET_UNITS[match.group("unit")]: amount})
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise FixtureError(f"Invalid timestamp: {text!r}") from None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=now.tzinfo)


def parse_sample(data: dict[str, Any], now: datetime) -> QuantitySample:
    """Parse one ``samples`` entry into a QuantitySample."""
    try:
        scope = Scope.parse(data["scope"])
        quantity = Quantity(float(data["value"]), Unit.parse(str(data["unit"])))
        start = parse_timestamp(data["start"], now)
    except KeyError as exc:
        raise FixtureError(f"Sample is missing field {exc.args[0]!r}: {data}") from None
    except (TypeError, ValueError) as exc:
        raise FixtureError(f"Invalid sample {data}: {exc}") from None
    if not quantity.is_compatible(CANONICAL_UNITS[scope]):
        raise FixtureError(
            f"Invalid sample {data}: unit {quantity.unit.value} does not fit {scope.short_name}"
        )
    end = parse_timestamp(data["end"], now) if "end" in data else start
    if end < start:
        raise FixtureError(f"Sample ends before it starts: {data}")
    return QuantitySample(scope=scope, quantity=quantity, start=start, end=end)


def _parse_statuses(raw: dict[str, Any] | None) -> dict[Scope, AuthorizationStatus]:
    statuses: dict[Scope, AuthorizationStatus] = {}
    for name, value in (raw or {}).items():
        try:
            statuses[Scope.parse(name)] = AuthorizationStatus(value)
        except ValueError as exc:
            raise FixtureError(f"Invalid authorization entry {name}: {value} ({exc})") from None
    return statuses


def load_fixture(path: str | Path, *, now: datetime | None = None) -> SimulatedHealthStore:
    """Build a SimulatedHealthStore from a YAML fixture file."""
    path = Path(path)
    if not path.is_file():
        raise FixtureError(f"Fixture file not found: {path}")
    now = now or datetime.now().astimezone()

    with open(path) as f:
        try:
            data: dict[str, Any] = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise FixtureError(f"Invalid YAML in {path}: {exc}") from None
    if not isinstance(data, dict):
        raise FixtureError(f"Fixture root must be a mapping: {path}")

    samples = [parse_sample(entry, now) for entry in data.get("samples") or []]
    store = SimulatedHealthStore(
        available=bool(data.get("available", True)),
        samples=samples,
        statuses=_parse_statuses(data.get("authorization")),
        authorization_decisions=_parse_statuses(data.get("authorization_decisions")),
    )
    logger.info("Loaded health fixture %s (%d samples)", path, len(samples))
    return store
