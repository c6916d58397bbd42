"""MCP tools exposing the permission gate and health data to clients.

Each tool call builds its own screen controller, the same way each app
screen owns its own state. Results are returned as JSON strings.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastmcp import FastMCP

if TYPE_CHECKING:
    from hov.core.config.settings import Settings
    from hov.domains.health.store import HealthStore

from hov.domains.health.domain_logic.models import NutritionEntry
from hov.domains.health.domain_logic.summaries import nutrition_totals
from hov.domains.health.screens.activity import ActivityScreen
from hov.domains.health.screens.base import HealthScreen
from hov.domains.health.screens.height import HeightScreen
from hov.domains.health.screens.heart_rate import HeartRateScreen
from hov.domains.health.screens.nutrition import NutritionScreen
from hov.domains.health.screens.permission_flow import FlowScreen, PermissionFlow

logger = logging.getLogger(__name__)


async def _messages(screen: HealthScreen) -> dict[str, Any]:
    """Wait for pending state writes, then report the screen's messages."""
    await screen.context.drain()
    result: dict[str, Any] = {}
    if screen.state.error_message:
        result["error_message"] = screen.state.error_message
    if screen.state.success_message:
        result["success_message"] = screen.state.success_message
    return result


def register_dashboard_tools(mcp: FastMCP, store: HealthStore, settings: Settings) -> None:
    """Register permission and health data tools on the MCP server."""

    # Session-only nutrition log; never written anywhere but the health store.
    session_entries: list[NutritionEntry] = []

    @mcp.tool
    async def check_permissions() -> str:
        """Report whether every required health data scope is authorized."""
        screen = HealthScreen(store)
        granted = screen.gate.check_all_permissions()
        return json.dumps({
            "has_all_permissions": granted,
            "scopes": {
                scope.short_name: status.value
                for scope, status in screen.gate.scope_statuses().items()
            },
        })

    @mcp.tool
    async def request_permissions() -> str:
        """Ask for access to all required scopes, then re-check them."""
        flow = PermissionFlow(store)
        screen = flow.start()
        if screen is FlowScreen.REQUESTING:
            screen = await flow.request()
        return json.dumps({
            "screen": screen.value,
            "has_all_permissions": screen is FlowScreen.MAIN,
            **await _messages(flow),
        })

    @mcp.tool
    async def get_height() -> str:
        """Return the most recent height measurement in centimeters."""
        screen = HeightScreen(store)
        ok = await screen.load()
        height = screen.height.value_cm if screen.height else None
        return json.dumps({
            "status": "ok" if ok else "error",
            "height_cm": round(height, 1) if height is not None else None,
            **await _messages(screen),
        })

    @mcp.tool
    async def get_today_activity() -> str:
        """Return today's step count and floors climbed with goal progress."""
        screen = ActivityScreen(store, step_goal=settings.step_goal, floor_goal=settings.floor_goal)
        ok = await screen.load()
        payload: dict[str, Any] = {"status": "ok" if ok else "error"}
        if screen.activity is not None:
            payload.update({
                "steps": int(screen.activity.steps),
                "floors": int(screen.activity.floors),
                "step_goal": screen.step_goal,
                "floor_goal": screen.floor_goal,
                "steps_progress": round(screen.steps_progress, 3),
                "floors_progress": round(screen.floors_progress, 3),
                "motivation": screen.motivation_message,
            })
        payload.update(await _messages(screen))
        return json.dumps(payload)

    @mcp.tool
    async def get_weekly_heart_rate(include_samples: bool = False) -> str:
        """Summarize heart rate over the last seven days.

        Args:
            include_samples: Also return every sample (timestamp and bpm).
        """
        screen = HeartRateScreen(store)
        ok = await screen.load()
        payload: dict[str, Any] = {"status": "ok" if ok else "error"}
        if ok:
            summary = screen.summary()
            payload.update({
                "count": summary.count,
                "average_bpm": round(summary.average),
                "max_bpm": round(summary.maximum),
                "min_bpm": round(summary.minimum),
                "zone": summary.zone,
            })
            if include_samples:
                payload["samples"] = [
                    {"timestamp": s.timestamp.isoformat(), "bpm": s.bpm}
                    for s in screen.samples
                ]
        payload.update(await _messages(screen))
        return json.dumps(payload)

    @mcp.tool
    async def log_nutrition(calories: float, protein: float) -> str:
        """Record a meal's energy (kcal) and protein (g) in the health store.

        Args:
            calories: Dietary energy in kilocalories.
            protein: Dietary protein in grams.
        """
        screen = NutritionScreen(store)
        ok = await screen.save_amounts(calories, protein)
        if ok:
            session_entries.extend(screen.entries)
        total_calories, total_protein = nutrition_totals(session_entries)
        return json.dumps({
            "status": "saved" if ok else "error",
            "session_total_calories": total_calories,
            "session_total_protein_g": round(total_protein, 1),
            "session_entries": len(session_entries),
            **await _messages(screen),
        })

    logger.info("Dashboard tools registered")
