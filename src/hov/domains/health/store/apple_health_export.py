"""Apple Health XML export loader.

Reads the ``export.xml`` produced by the iOS Health app (Share → Export
Health Data) and turns the records for the scopes this app uses into
samples for a SimulatedHealthStore. Uses iterparse so large exports do not
have to fit in memory as a tree.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path

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

_SCOPES_BY_TYPE = {scope.value: scope for scope in Scope}


def _parse_date(date_str: str) -> datetime:
    """Parse Apple Health date format: '2025-12-01 08:30:00 -0500'.

    Dates without an offset are taken as local time.
    """
    try:
        return datetime.strptime(date_str, "%Y-%m-%d %H:%M:%S %z")
    except ValueError:
        parsed = datetime.fromisoformat(date_str)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=datetime.now().astimezone().tzinfo)


def parse_export_samples(
    export_path: str | Path,
    *,
    since: datetime | None = None,
) -> list[QuantitySample]:
    """Return quantity samples for known scopes from an Apple Health export.

    Records with an unknown unit or an unparseable value/date are skipped.

    Raises:
        FixtureError: If the file is missing or is not valid XML.
    """
    path = Path(export_path)
    if not path.exists():
        raise FixtureError(f"Export file not found: {path}")

    samples: list[QuantitySample] = []
    skipped = 0
    try:
        for _, elem in ET.iterparse(str(path), events=("end",)):
            if elem.tag != "Record":
                continue
            scope = _SCOPES_BY_TYPE.get(elem.get("type", ""))
            if scope is not None:
                try:
                    start = _parse_date(elem.get("startDate", ""))
                    end = _parse_date(elem.get("endDate", "") or elem.get("startDate", ""))
                    quantity = Quantity(
                        float(elem.get("value", "")), Unit.parse(elem.get("unit", ""))
                    )
                    if not quantity.is_compatible(CANONICAL_UNITS[scope]):
                        raise ValueError(f"unit {quantity.unit.value} does not fit {scope.short_name}")
                except (ValueError, TypeError):
                    skipped += 1
                else:
                    if since is None or start >= since:
                        samples.append(QuantitySample(scope, quantity, start, end))
            elem.clear()
    except ET.ParseError as exc:
        raise FixtureError(f"Invalid XML: {exc}") from exc

    if skipped:
        logger.warning("Skipped %d unreadable records in %s", skipped, path)
    logger.info("Parsed Apple Health export %s: %d samples", path, len(samples))
    return samples


def load_export(
    export_path: str | Path,
    *,
    since: datetime | None = None,
) -> SimulatedHealthStore:
    """Build a store seeded from an export.

    The user's own export implies read access; write scopes start
    undetermined so the app still goes through the authorization prompt.
    """
    store = SimulatedHealthStore(samples=parse_export_samples(export_path, since=since))
    for scope in (Scope.HEIGHT, Scope.STEP_COUNT, Scope.FLIGHTS_CLIMBED, Scope.HEART_RATE):
        store.set_status(scope, AuthorizationStatus.SHARING_AUTHORIZED)
    return store
