"""Weekly heart-rate screen."""

from __future__ import annotations

from typing import Any

from hov.domains.health.domain_logic.models import HeartRateSample
from hov.domains.health.domain_logic.summaries import HeartRateSummary, summarize_heart_rate
from hov.domains.health.screens.base import LOAD_FAILED, HealthScreen, OperationFailed

NO_HEART_RATE_DATA = (
    "No heart rate data. Wear your watch during activity to collect heart rate samples."
)


class HeartRateScreen(HealthScreen):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.samples: list[HeartRateSample] = []

    async def load(self) -> bool:
        try:
            self.samples = await self._perform(self.facade.fetch_weekly_heart_rate, LOAD_FAILED)
        except OperationFailed:
            return False
        if self.samples:
            self.state.set_success("Heart rate data loaded successfully!")
        else:
            self.state.set_error(NO_HEART_RATE_DATA)
        return True

    def summary(self) -> HeartRateSummary:
        return summarize_heart_rate(self.samples)
