"""Health Overview MCP Server — application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from hov.core.config.settings import get_settings
from hov.domains.health.prompts.health_prompts import register_health_prompts
from hov.domains.health.resources.scopes import register_health_scope_resources
from hov.domains.health.store import HealthStore
from hov.domains.health.store.factory import create_store
from hov.domains.health.tools.dashboard_tools import register_dashboard_tools

logger = logging.getLogger(__name__)


def create_app(
    *,
    store_override: HealthStore | None = None,
    store_backend: str | None = None,
) -> FastMCP:
    """Create and configure the Health Overview MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Builds the health store selected in settings (or uses the override)
    3. Registers all tools, resources, and prompts

    ``store_backend`` labels an injected store in ``health_check``.
    """
    settings = get_settings()

    # --- Server instance ---
    server = FastMCP(
        "Health Overview",
        instructions=(
            "Personal health overview server. Checks and requests access to "
            "health data, reads height, today's steps and floors, and weekly "
            "heart rate, and records nutrition entries."
        ),
    )

    # --- Health store ---
    if store_override is not None:
        store = store_override
    else:
        store = create_store(
            settings.health_store_backend,
            fixture_path=settings.health_fixture_path,
            export_path=settings.apple_health_export_path,
        )
        logger.info("Using %s health store", settings.health_store_backend)

    if store_backend is not None:
        backend_label = store_backend
    elif store_override is not None:
        backend_label = "override"
    else:
        backend_label = settings.health_store_backend

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": "Health Overview",
            "version": "0.1.0",
            "store_backend": backend_label,
            "health_data_available": store.is_health_data_available(),
        }

    register_dashboard_tools(server, store, settings)

    # --- Register resources ---
    register_health_scope_resources(server)

    # --- Register prompts ---
    register_health_prompts(server)

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
