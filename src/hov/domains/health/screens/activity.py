"""Steps and floors screen."""

from __future__ import annotations

from typing import Any

from hov.domains.health.domain_logic import summaries
from hov.domains.health.domain_logic.models import ActivitySample
from hov.domains.health.screens.base import LOAD_FAILED, HealthScreen, OperationFailed


class ActivityScreen(HealthScreen):
    """Today's steps and floors with progress towards the daily goals."""

    activity: ActivitySample | None = None

    def __init__(
        self,
        *args: Any,
        step_goal: int = summaries.DEFAULT_STEP_GOAL,
        floor_goal: int = summaries.DEFAULT_FLOOR_GOAL,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.step_goal = step_goal
        self.floor_goal = floor_goal

    async def load(self) -> bool:
        try:
            self.activity = await self._perform(
                self.facade.fetch_today_activity_data, LOAD_FAILED
            )
        except OperationFailed:
            return False
        self.state.set_success("Activity data loaded successfully!")
        return True

    @property
    def steps_progress(self) -> float:
        steps = self.activity.steps if self.activity else 0.0
        return summaries.goal_progress(steps, self.step_goal)

    @property
    def floors_progress(self) -> float:
        floors = self.activity.floors if self.activity else 0.0
        return summaries.goal_progress(floors, self.floor_goal)

    @property
    def motivation(self) -> str | None:
        if self.activity is None:
            return None
        return summaries.motivation(
            self.activity, step_goal=self.step_goal, floor_goal=self.floor_goal
        )

    @property
    def motivation_message(self) -> str | None:
        key = self.motivation
        return summaries.MOTIVATION_MESSAGES[key] if key else None
