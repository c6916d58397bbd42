"""One-shot bridge from a completion callback to an awaitable future."""

from __future__ import annotations

import asyncio
import logging
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CompletionBridge(Generic[T]):
    """Delivers exactly one outcome from a callback into an asyncio future.

    ``resolve``/``reject`` may be called from any thread. The first call
    settles the future; later calls are logged and ignored. If the awaiting
    side was cancelled, a late outcome is dropped.

    Usage::

        bridge = CompletionBridge[float](loop, "fetch_sum")
        store.query_statistics(query, lambda stats, err: bridge.settle(stats, err))
        stats = await bridge.future
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, label: str = "") -> None:
        self._loop = loop
        self._label = label
        self.future: asyncio.Future[T] = loop.create_future()

    def resolve(self, value: T) -> None:
        if self._loop.is_closed():
            logger.debug("Loop closed; dropping result for %s", self._label or "operation")
            return
        self._loop.call_soon_threadsafe(self._set_result, value)

    def reject(self, error: BaseException) -> None:
        if self._loop.is_closed():
            logger.debug("Loop closed; dropping failure for %s", self._label or "operation")
            return
        self._loop.call_soon_threadsafe(self._set_exception, error)

    def settle(self, value: T, error: BaseException | None) -> None:
        """Callback-style: an error wins over any value."""
        if error is not None:
            self.reject(error)
        else:
            self.resolve(value)

    def _set_result(self, value: T) -> None:
        if self.future.done():
            logger.debug("Ignoring extra completion for %s", self._label or "operation")
            return
        self.future.set_result(value)

    def _set_exception(self, error: BaseException) -> None:
        if self.future.done():
            logger.debug("Ignoring extra failure for %s: %s", self._label or "operation", error)
            return
        self.future.set_exception(error)
