"""Builds the health store selected in settings."""

from __future__ import annotations

import logging

from hov.domains.health.store import HealthStore
from hov.domains.health.store.simulated import SimulatedHealthStore

logger = logging.getLogger(__name__)


def create_store(
    backend: str,
    *,
    fixture_path: str = "",
    export_path: str = "",
) -> HealthStore:
    """Factory function to create a health store by backend name.

    Args:
        backend: "simulated" or "apple_health_export".
        fixture_path: YAML fixture for the simulated store (optional).
        export_path: Apple Health export.xml (required for apple_health_export).

    Returns:
        A HealthStore instance.
    """
    if backend == "simulated":
        if not fixture_path:
            logger.info("Using empty simulated health store")
            return SimulatedHealthStore()
        from hov.domains.health.store.fixtures import load_fixture

        return load_fixture(fixture_path)
    elif backend == "apple_health_export":
        if not export_path:
            raise ValueError("apple_health_export backend requires APPLE_HEALTH_EXPORT_PATH")
        from hov.domains.health.store.apple_health_export import load_export

        return load_export(export_path)
    else:
        raise ValueError(f"Unknown health store backend: {backend}")
