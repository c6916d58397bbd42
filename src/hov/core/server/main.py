"""Health Overview server entry point — ``python -m hov.core.server.main``."""

from __future__ import annotations

import logging
from ipaddress import ip_address

from hov.core.config.settings import get_settings
from hov.core.server.app import create_app
from hov.domains.health.errors import FixtureError
from hov.domains.health.store.factory import create_store


def _is_loopback_host(host: str) -> bool:
    if host in {"localhost"}:
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def run() -> None:
    """Start the Health Overview MCP server with Streamable HTTP transport."""
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.hov_log_level.upper(), logging.INFO))

    logger = logging.getLogger(__name__)
    if not settings.hov_allow_insecure_bind and not _is_loopback_host(settings.hov_host):
        raise RuntimeError(
            "Refusing to bind the health server to a non-loopback host without an auth layer. "
            "Set HOV_ALLOW_INSECURE_BIND=true to override (unsafe)."
        )

    # Build the store before binding so a bad fixture or export stops startup.
    try:
        store = create_store(
            settings.health_store_backend,
            fixture_path=settings.health_fixture_path,
            export_path=settings.apple_health_export_path,
        )
    except (FixtureError, ValueError) as exc:
        raise RuntimeError(f"Cannot start Health Overview server: {exc}") from exc
    if not store.is_health_data_available():
        logger.warning("Health data is not available; data tools will report errors")

    logger.info(
        "Starting Health Overview server on %s:%d (store: %s)",
        settings.hov_host,
        settings.hov_port,
        settings.health_store_backend,
    )

    mcp = create_app(store_override=store, store_backend=settings.health_store_backend)
    mcp.run(
        transport="streamable-http",
        host=settings.hov_host,
        port=settings.hov_port,
    )


if __name__ == "__main__":
    run()
