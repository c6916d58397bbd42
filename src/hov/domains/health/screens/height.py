"""Height screen."""

from __future__ import annotations

from hov.domains.health.domain_logic.models import HeightSample
from hov.domains.health.screens.base import LOAD_FAILED, HealthScreen, OperationFailed


class HeightScreen(HealthScreen):
    height: HeightSample | None = None

    async def load(self) -> bool:
        """Fetch the latest height. Missing data is not an error and gets no message."""
        try:
            self.height = await self._perform(self.facade.fetch_height, LOAD_FAILED)
        except OperationFailed:
            return False
        if self.height is not None:
            self.state.set_success("Height data loaded successfully!")
        return True
