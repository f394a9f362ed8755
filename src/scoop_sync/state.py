# SPDX-License-Identifier: MIT
"""Observable synchronization state.

The orchestrator owns one SyncState and is its only writer. Consumers
read the current values or subscribe to changes.
"""

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from .enums import SyncPhase
from .logging_config import get_detail_logger
from .models import InstalledApp, RepositorySource


detail_logger = get_detail_logger()

T = TypeVar("T")

Subscriber = Callable[[T], None]
Unsubscribe = Callable[[], None]


class Observable(Generic[T]):
    """A value container that notifies subscribers when it is set."""

    def __init__(self, initial: T, name: str = "observable"):
        self.name = name
        self._value = initial
        self._subscribers: list[Subscriber[T]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Replace the value and notify every subscriber."""
        self._value = value
        for callback in list(self._subscribers):
            self._notify(callback, value)

    def subscribe(self, callback: Subscriber[T]) -> Unsubscribe:
        """Register a callback; it is called immediately with the current value.

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(callback)
        self._notify(callback, self._value)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, callback: Subscriber[T], value: T) -> None:
        # A failing subscriber must not starve the others
        try:
            callback(value)
        except Exception as e:
            detail_logger.exception(f"Subscriber of '{self.name}' raised: {e}")


class SyncState:
    """Reactive containers read by the presentation layer."""

    def __init__(self) -> None:
        self.loading: Observable[bool] = Observable(False, "loading")
        self.last_error: Observable[str | None] = Observable(None, "last_error")
        self.apps: Observable[list[InstalledApp]] = Observable([], "apps")
        self.buckets: Observable[list[RepositorySource]] = Observable([], "buckets")
        self.phase: Observable[SyncPhase] = Observable(SyncPhase.IDLE, "phase")
        self.background_check_pending: Observable[bool] = Observable(
            False, "background_check_pending"
        )

    def publish_lists(
        self, apps: list[InstalledApp], buckets: list[RepositorySource]
    ) -> None:
        """Replace both lists wholesale."""
        self.apps.set(list(apps))
        self.buckets.set(list(buckets))

    def snapshot(self) -> dict[str, Any]:
        """Plain view of the current values."""
        return {
            "loading": self.loading.value,
            "last_error": self.last_error.value,
            "phase": self.phase.value,
            "background_check_pending": self.background_check_pending.value,
            "apps": list(self.apps.value),
            "buckets": list(self.buckets.value),
        }
