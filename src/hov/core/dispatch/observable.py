"""Observable state owned by a single screen.

Each screen builds its own ``ScreenState``; there is no shared instance.
Writes are dispatched onto the presentation context and observers are
notified from there, so a subscriber always runs on the loop's thread.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from hov.core.dispatch.context import PresentationContext

logger = logging.getLogger(__name__)

Observer = Callable[[str, Any], None]


class ObservableState:
    """A small bag of named values with a subscribe/notify contract.

    Subclasses declare their fields and defaults in ``FIELDS``. Reads are
    synchronous; ``publish`` schedules the write on the presentation context.
    Observers receive ``(name, value)`` for every applied write, including
    writes that do not change the value.
    """

    FIELDS: dict[str, Any] = {}

    def __init__(self, context: PresentationContext) -> None:
        self._context = context
        self._values: dict[str, Any] = dict(self.FIELDS)
        self._observers: list[Observer] = []

    @property
    def context(self) -> PresentationContext:
        return self._context

    def get(self, name: str) -> Any:
        return self._values[name]

    def snapshot(self) -> dict[str, Any]:
        return dict(self._values)

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer; returns a function that unsubscribes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def publish(self, name: str, value: Any) -> None:
        if name not in self._values:
            raise KeyError(f"{type(self).__name__} has no field {name!r}")
        self._context.dispatch(self._apply, name, value)

    def _apply(self, name: str, value: Any) -> None:
        self._values[name] = value
        for observer in list(self._observers):
            try:
                observer(name, value)
            except Exception:
                logger.exception("Observer failed for %s=%r", name, value)


class ScreenState(ObservableState):
    """Loading flag, transient messages and the permission gate result."""

    FIELDS = {
        "is_loading": False,
        "error_message": None,
        "success_message": None,
        "has_all_permissions": False,
    }

    @property
    def is_loading(self) -> bool:
        return self._values["is_loading"]

    @property
    def error_message(self) -> str | None:
        return self._values["error_message"]

    @property
    def success_message(self) -> str | None:
        return self._values["success_message"]

    @property
    def has_all_permissions(self) -> bool:
        return self._values["has_all_permissions"]

    def set_loading(self, loading: bool) -> None:
        self.publish("is_loading", loading)

    def set_error(self, message: str | None) -> None:
        self.publish("error_message", message)

    def set_success(self, message: str | None) -> None:
        self.publish("success_message", message)

    def set_has_all_permissions(self, granted: bool) -> None:
        self.publish("has_all_permissions", granted)

    def clear_messages(self) -> None:
        self.publish("error_message", None)
        self.publish("success_message", None)
