"""MCP resource describing the scopes the app needs."""

from __future__ import annotations

import json

from fastmcp import FastMCP

from hov.domains.health.domain_logic.models import READ_SCOPE_ORDER, WRITE_SCOPE_ORDER


def register_health_scope_resources(mcp: FastMCP) -> None:
    """Register scope discovery resources on the MCP server."""

    @mcp.resource("health://scopes")
    def health_scopes_resource() -> str:
        """Health data scopes the app reads and writes."""
        return json.dumps(
            {
                "read": [
                    {"name": s.short_name, "identifier": s.value} for s in READ_SCOPE_ORDER
                ],
                "write": [
                    {"name": s.short_name, "identifier": s.value} for s in WRITE_SCOPE_ORDER
                ],
            },
            indent=2,
        )
