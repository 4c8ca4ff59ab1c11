"""Debounced hide timer for the on-screen controls."""

from __future__ import annotations

from typing import Callable, Hashable, Optional

from .ports import SchedulerPort


class ControlVisibilityTimer:
    """Holds at most one pending hide; arming again replaces it."""

    def __init__(
        self,
        *,
        scheduler: SchedulerPort,
        idle_seconds: float,
        on_idle: Callable[[], None],
        logger,
    ) -> None:
        self._scheduler = scheduler
        self.idle_seconds = float(idle_seconds)
        self._on_idle = on_idle
        self.logger = logger
        self._token: Optional[Hashable] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._token is not None

    def arm(self) -> None:
        self.cancel()
        generation = self._generation
        self._token = self._scheduler.call_later(
            self.idle_seconds, lambda: self._fire(generation)
        )

    def cancel(self) -> None:
        self._generation += 1
        token = self._token
        if token is None:
            return
        self._token = None
        try:
            self._scheduler.cancel(token)
        except Exception:
            self.logger.debug("Hide timer was already gone: %r", token)

    def _fire(self, generation: int) -> None:
        # A callback that slipped past cancel() belongs to an older arming.
        if generation != self._generation:
            return
        self._token = None
        self._on_idle()
