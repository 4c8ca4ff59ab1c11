"""Folds native media lifecycle signals into session state."""

from __future__ import annotations

from typing import Callable

from ..domain.session_state import MediaSessionState


class NativeEventBridge:
    """One-directional element -> state translation.

    Only progress, metadata, stall/resume and the fullscreen change signal
    are trusted. Play/pause echoes from the element are never used to set
    the play intent.
    """

    def __init__(
        self,
        *,
        state: MediaSessionState,
        on_transition: Callable[[], None],
        logger,
    ) -> None:
        self._state = state
        self._on_transition = on_transition
        self.logger = logger

    def on_progress(self, seconds: float) -> None:
        if not self._state.has_source:
            return
        self._state.apply_progress(seconds)
        self._on_transition()

    def on_metadata_ready(self, duration_seconds: float) -> None:
        if not self._state.has_source:
            return
        if not self._state.apply_duration(duration_seconds):
            self.logger.debug("Ignoring unusable media duration: %r", duration_seconds)
            return
        self.logger.debug("Media duration: %.3f s", self._state.duration_seconds)
        self._on_transition()

    def on_stalled(self) -> None:
        if not self._state.has_source or self._state.is_buffering:
            return
        self._state.set_buffering(True)
        self._on_transition()

    def on_resumed(self) -> None:
        if not self._state.has_source or not self._state.is_buffering:
            return
        self._state.set_buffering(False)
        self._on_transition()

    def on_fullscreen_changed(self, is_this_container: bool) -> None:
        if not self._state.has_source:
            return
        self._state.set_fullscreen(is_this_container)
        self._on_transition()
