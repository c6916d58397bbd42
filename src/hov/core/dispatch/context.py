"""Presentation context — the event loop that owns observer-visible state.

Store completions can arrive on any thread. Anything an observer can see
is changed only inside callbacks scheduled on this context's loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


class PresentationContext:
    """Schedules callables onto one asyncio event loop.

    Usage::

        context = PresentationContext(asyncio.get_running_loop())
        context.dispatch(state.apply, "is_loading", True)  # safe from any thread
        await context.drain()                              # everything so far has run
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    @classmethod
    def current(cls) -> PresentationContext:
        """Bind to the running loop. Must be called from a coroutine."""
        return cls(asyncio.get_running_loop())

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def dispatch(self, callback: Callable[..., Any], *args: Any) -> None:
        """Run ``callback(*args)`` on the loop, in dispatch order."""
        if self._loop.is_closed():
            logger.debug("Dropping dispatch to closed loop: %r", callback)
            return
        self._loop.call_soon_threadsafe(callback, *args)

    def in_context(self) -> bool:
        """True when called from the loop's own thread while it runs."""
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    async def drain(self) -> None:
        """Wait until every callback dispatched before this call has run."""
        done = self._loop.create_future()
        self.dispatch(_mark_done, done)
        await done


def _mark_done(future: asyncio.Future) -> None:
    if not future.done():
        future.set_result(None)

