"""Permission gate — one boolean answering "can the app access everything?".

The gate is the conjunction of every required read scope and every required
write scope being authorized. It is recomputed from the store on each check
and never remembered between checks.
"""

from __future__ import annotations

import asyncio
import logging

from hov.core.dispatch.completion import CompletionBridge
from hov.core.dispatch.observable import ScreenState
from hov.domains.health.domain_logic.models import (
    READ_SCOPE_ORDER,
    READ_SCOPES,
    WRITE_SCOPE_ORDER,
    WRITE_SCOPES,
)
from hov.domains.health.errors import AuthorizationDeniedError, HealthDataUnavailableError
from hov.domains.health.store import AuthorizationStatus, HealthStore, Scope

logger = logging.getLogger(__name__)


class PermissionGate:
    """Polls and requests authorization for the fixed scope set.

    Usage::

        gate = PermissionGate(store, state)
        if not gate.check_all_permissions():
            granted = await gate.request_and_verify()
    """

    def __init__(self, store: HealthStore, state: ScreenState) -> None:
        self._store = store
        self._state = state

    def check_all_permissions(self) -> bool:
        """Recompute the gate and publish it to the screen state.

        Returns False without querying any scope when health data is
        unavailable. Otherwise stops at the first scope that is not
        ``SHARING_AUTHORIZED``; the result equals a full evaluation.
        """
        if not self._store.is_health_data_available():
            logger.info("Health data unavailable; permissions not granted")
            self._state.set_has_all_permissions(False)
            return False

        granted = all(
            self._is_authorized(scope) for scope in READ_SCOPE_ORDER
        ) and all(
            self._is_authorized(scope) for scope in WRITE_SCOPE_ORDER
        )
        logger.info("Permission check: %s", "granted" if granted else "not granted")
        self._state.set_has_all_permissions(granted)
        return granted

    def scope_statuses(self) -> dict[Scope, AuthorizationStatus]:
        """Status of every required scope, without short-circuiting."""
        if not self._store.is_health_data_available():
            return {}
        return {
            scope: self._store.authorization_status(scope)
            for scope in READ_SCOPE_ORDER + WRITE_SCOPE_ORDER
        }

    async def request_all_authorizations(self) -> None:
        """Ask once for every read and write scope.

        Raises:
            HealthDataUnavailableError: Health data is unavailable; the
                store is not contacted.
            AuthorizationDeniedError: The request completed with
                ``success=False`` and no error.
            Exception: Any error the store reports, unchanged.
        """
        if not self._store.is_health_data_available():
            raise HealthDataUnavailableError()

        bridge: CompletionBridge[None] = CompletionBridge(
            asyncio.get_running_loop(), "request_authorization"
        )

        def completion(success: bool, error: Exception | None) -> None:
            if error is not None:
                bridge.reject(error)
            elif not success:
                bridge.reject(AuthorizationDeniedError())
            else:
                bridge.resolve(None)

        logger.debug("Requesting authorization for %d scopes", len(READ_SCOPES | WRITE_SCOPES))
        self._store.request_authorization(set(WRITE_SCOPES), set(READ_SCOPES), completion)
        await bridge.future
        logger.info("Authorization request completed")

    async def request_and_verify(self) -> bool:
        """Request authorization, then trust only a fresh check.

        A successful request only means the prompt was handled; the user may
        still have declined individual scopes.
        """
        await self.request_all_authorizations()
        return self.check_all_permissions()

    def _is_authorized(self, scope: Scope) -> bool:
        return self._store.authorization_status(scope) == AuthorizationStatus.SHARING_AUTHORIZED
