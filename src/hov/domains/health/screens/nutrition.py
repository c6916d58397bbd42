"""Nutrition entry screen.

Successful writes are appended to a log that lives only as long as the
screen; the health store remains the record of what was eaten.
"""

from __future__ import annotations

import math
from typing import Any

from hov.domains.health.domain_logic.models import NutritionEntry
from hov.domains.health.domain_logic.summaries import nutrition_totals
from hov.domains.health.screens.base import SAVE_FAILED, HealthScreen, OperationFailed

INVALID_INPUT = "Please enter valid numbers."


def parse_amount(text: str) -> float | None:
    """Parse a form field; None when it is empty or not a finite number."""
    try:
        value = float(text.strip())
    except (AttributeError, ValueError):
        return None
    return value if math.isfinite(value) else None


class NutritionScreen(HealthScreen):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.entries: list[NutritionEntry] = []

    @staticmethod
    def is_form_valid(calories_text: str, protein_text: str) -> bool:
        return parse_amount(calories_text) is not None and parse_amount(protein_text) is not None

    async def save(self, calories_text: str, protein_text: str) -> bool:
        """Validate the form, write to the store and log the entry on success."""
        calories = parse_amount(calories_text)
        protein = parse_amount(protein_text)
        if calories is None or protein is None:
            self.state.set_error(INVALID_INPUT)
            return False
        return await self.save_amounts(calories, protein)

    async def save_amounts(self, calories: float, protein: float) -> bool:
        try:
            request = await self._perform(
                lambda: self.facade.save_nutrition_data(calories, protein), SAVE_FAILED
            )
        except OperationFailed:
            return False
        self.entries.append(NutritionEntry.from_request(request))
        self.state.set_success("Nutrition data saved successfully!")
        return True

    def totals(self) -> tuple[int, float]:
        return nutrition_totals(self.entries)

    def recent_entries(self, limit: int = 3) -> list[NutritionEntry]:
        """Newest first."""
        return list(reversed(self.entries))[:limit]
