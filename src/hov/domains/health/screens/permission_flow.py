"""Permission flow — decides which top-level screen the app shows.

    CHECKING --granted--> MAIN
    CHECKING --not granted--> REQUESTING
    REQUESTING --granted--> MAIN
    REQUESTING --declined / open settings--> NO_PERMISSION
    NO_PERMISSION --retry--> REQUESTING

MAIN is only ever entered after the gate reports true.
"""

from __future__ import annotations

import enum
import logging
from typing import Any

from hov.core.dispatch.observable import ObservableState
from hov.domains.health.screens.base import HealthScreen, OperationFailed

logger = logging.getLogger(__name__)

REQUEST_FAILED = "Permission request failed"


class FlowScreen(str, enum.Enum):
    CHECKING = "checking"
    REQUESTING = "requesting"
    NO_PERMISSION = "no_permission"
    MAIN = "main"


class InvalidTransitionError(RuntimeError):
    """Raised when a flow action is not allowed from the current screen."""


class FlowState(ObservableState):
    FIELDS = {"screen": FlowScreen.CHECKING}


class PermissionFlow(HealthScreen):
    """Drives the CHECKING → REQUESTING → MAIN flow for one app session.

    ``screen`` is updated synchronously for the flow's own decisions and
    published through ``flow_state`` for observers.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.flow_state = FlowState(self.context)
        self._screen = FlowScreen.CHECKING

    @property
    def screen(self) -> FlowScreen:
        return self._screen

    def start(self) -> FlowScreen:
        """Run the initial permission check."""
        self._move(FlowScreen.CHECKING)
        granted = self.gate.check_all_permissions()
        return self._move(FlowScreen.MAIN if granted else FlowScreen.REQUESTING)

    async def request(self) -> FlowScreen:
        """Show the platform prompt, then re-check.

        Only the re-check decides the outcome. A request error keeps the flow
        on REQUESTING with an error message; a completed request that left
        any scope unauthorized moves to NO_PERMISSION.
        """
        self._require(FlowScreen.REQUESTING)
        try:
            granted = await self._perform(self.gate.request_and_verify, REQUEST_FAILED)
        except OperationFailed:
            return self._screen
        if granted:
            self.state.set_success("All permissions have been granted!")
            return self._move(FlowScreen.MAIN)
        logger.info("Authorization request completed but not every scope was granted")
        return self._move(FlowScreen.NO_PERMISSION)

    def open_settings(self) -> FlowScreen:
        """The user chose to manage permissions in the system settings instead."""
        self._require(FlowScreen.REQUESTING)
        return self._move(FlowScreen.NO_PERMISSION)

    def retry(self) -> FlowScreen:
        self._require(FlowScreen.NO_PERMISSION)
        return self._move(FlowScreen.REQUESTING)

    def app_became_active(self) -> FlowScreen:
        """Re-check after returning to the app (e.g. from the settings app)."""
        if self._screen in (FlowScreen.REQUESTING, FlowScreen.NO_PERMISSION):
            if self.gate.check_all_permissions():
                return self._move(FlowScreen.MAIN)
        return self._screen

    def _require(self, expected: FlowScreen) -> None:
        if self._screen is not expected:
            raise InvalidTransitionError(
                f"Action requires {expected.value}, flow is on {self._screen.value}"
            )

    def _move(self, screen: FlowScreen) -> FlowScreen:
        if screen is not self._screen:
            logger.debug("Permission flow: %s -> %s", self._screen.value, screen.value)
        self._screen = screen
        self.flow_state.publish("screen", screen)
        return screen
