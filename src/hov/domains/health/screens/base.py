"""Shared plumbing for screen controllers.

Every screen owns its own state, gate and facade. Nothing is shared across
screens, so each one polls the store independently.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

from hov.core.dispatch.context import PresentationContext
from hov.core.dispatch.observable import ScreenState
from hov.domains.health.domain_logic.data_access import Clock, HealthDataFacade, local_now
from hov.domains.health.domain_logic.permission_gate import PermissionGate
from hov.domains.health.store import HealthStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

LOAD_FAILED = "Failed to load data"
SAVE_FAILED = "Failed to save data"


class OperationFailed(Exception):
    """Internal marker: the operation failed and its message was published."""


class HealthScreen:
    """Base controller: a ScreenState plus the gate and facade that feed it.

    Must be constructed inside a running event loop unless a context is
    passed explicitly.
    """

    def __init__(
        self,
        store: HealthStore,
        *,
        context: PresentationContext | None = None,
        clock: Clock = local_now,
    ) -> None:
        self.context = context or PresentationContext.current()
        self.state = ScreenState(self.context)
        self.gate = PermissionGate(store, self.state)
        self.facade = HealthDataFacade(store, self.gate, clock=clock)

    async def _perform(self, operation: Callable[[], Awaitable[T]], failure_prefix: str) -> T:
        """Run one operation with the loading/message protocol.

        Clears messages and raises the loading flag first. On failure the
        error message is published and ``OperationFailed`` is raised.
        """
        self.state.set_loading(True)
        self.state.clear_messages()
        try:
            result = await operation()
        except Exception as exc:
            logger.warning("%s: %s", failure_prefix, exc)
            self.state.set_loading(False)
            self.state.set_error(f"{failure_prefix}: {exc}")
            raise OperationFailed(str(exc)) from exc
        self.state.set_loading(False)
        return result
