"""MCP Prompts — interaction templates for the health overview."""

from __future__ import annotations

from fastmcp import FastMCP


def register_health_prompts(mcp: FastMCP) -> None:
    """Register health overview MCP prompts."""

    @mcp.prompt()
    def daily_overview() -> str:
        """Prompt template for a summary of today's health data."""
        return """Please give me an overview of my health data today:

1. Check that the app has all the permissions it needs (ask for them if not)
2. My latest height
3. Today's steps and floors climbed, and how close I am to my goals
4. My heart rate over the past week: average, highest, lowest

Keep it short and encouraging."""

    @mcp.prompt()
    def log_meal(description: str = "my last meal") -> str:
        """Prompt template for recording a meal's calories and protein."""
        return f"""I'd like to log {description}.

Estimate its energy in kilocalories and its protein in grams, confirm the
numbers with me, then record them with the log_nutrition tool."""
