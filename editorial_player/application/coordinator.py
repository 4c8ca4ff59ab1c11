"""Playback coordination engine for a single media session."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Optional

from ..domain.session_state import MediaSessionState, PlaybackStatus
from .commands import Command, CommandRouter
from .event_bridge import NativeEventBridge
from .focus_policy import FocusExclusionPolicy
from .ports import (
    FullscreenPort,
    KeyEvent,
    KeySourcePort,
    MediaElementPort,
    SchedulerPort,
    Unsubscribe,
)
from .visibility_timer import ControlVisibilityTimer

StateObserver = Callable[[MediaSessionState], None]


class PlaybackCoordinator:
    """Owns the session state and serialises every producer into it.

    Producers are the media element, the fullscreen host, the global key
    source, pointer callbacks from the view and the hide timer. Each call
    runs one transition to completion and then notifies observers with a
    copy of the state.
    """

    def __init__(
        self,
        *,
        source: Optional[str],
        element: Optional[MediaElementPort],
        fullscreen: FullscreenPort,
        key_source: KeySourcePort,
        scheduler: SchedulerPort,
        logger,
        poster: str = "",
        known_duration: Optional[float] = None,
        idle_seconds: float = 3.0,
        seek_step_seconds: float = 5.0,
        volume_step: float = 0.1,
        policy: Optional[FocusExclusionPolicy] = None,
    ) -> None:
        self.source = source or ""
        self.poster = poster or ""
        self.logger = logger
        self._element = element
        self._fullscreen = fullscreen
        self._key_source = key_source
        # Without an element there is nothing to drive: treat it as no source.
        self._state = MediaSessionState.for_source(
            source if element is not None else None,
            known_duration=known_duration,
        )
        self.policy = policy or FocusExclusionPolicy(
            seek_step_seconds=seek_step_seconds,
            volume_step=volume_step,
        )
        self.router = CommandRouter(
            state=self._state,
            element=element,
            fullscreen=fullscreen,
            logger=logger,
        )
        self.bridge = NativeEventBridge(
            state=self._state,
            on_transition=self._after_transition,
            logger=logger,
        )
        self.timer = ControlVisibilityTimer(
            scheduler=scheduler,
            idle_seconds=idle_seconds,
            on_idle=self._on_controls_idle,
            logger=logger,
        )
        self._observers: list[StateObserver] = []
        self._subscriptions: list[Unsubscribe] = []
        self._was_playing = False

    @property
    def has_source(self) -> bool:
        return self._state.has_source

    @property
    def state(self) -> MediaSessionState:
        return replace(self._state)

    @property
    def started(self) -> bool:
        return bool(self._subscriptions)

    def add_observer(self, observer: StateObserver) -> Unsubscribe:
        self._observers.append(observer)

        def remove() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return remove

    def start(self) -> None:
        if self.started or not self.has_source:
            return
        acquired: list[Unsubscribe] = []
        try:
            assert self._element is not None
            acquired.append(self._element.subscribe(self.bridge))
            acquired.append(self._fullscreen.subscribe(self.bridge.on_fullscreen_changed))
            acquired.append(self._key_source.subscribe(self.handle_key))
        except Exception:
            self.logger.exception("Failed to subscribe player event sources")
            self._release(acquired)
            raise
        self._subscriptions = acquired
        self._state.set_fullscreen(self._fullscreen.is_active())
        self.logger.info("Playback session started: %s", self.source)
        self._notify()

    def close(self) -> None:
        self.timer.cancel()
        if not self._subscriptions:
            return
        subscriptions, self._subscriptions = self._subscriptions, []
        self._release(subscriptions)
        self.logger.info("Playback session closed: %s", self.source)

    def __enter__(self) -> "PlaybackCoordinator":
        self.start()
        return self

    def __exit__(self, *_exc_info) -> None:
        self.close()

    def _release(self, subscriptions: list[Unsubscribe]) -> None:
        for unsubscribe in reversed(subscriptions):
            try:
                unsubscribe()
            except Exception:
                self.logger.exception("Failed to unsubscribe player event source")

    def dispatch(self, command: Command) -> bool:
        if not self.has_source:
            return False
        changed = self.router.apply(command)
        if changed:
            self._after_transition()
        return changed

    def handle_key(self, event: KeyEvent) -> bool:
        """Route a global key event; True means the key was consumed."""
        if not self.has_source:
            return False
        command = self.policy.command_for(event)
        if command is None:
            return False
        self.dispatch(command)
        return True

    def on_pointer_move(self) -> None:
        if not self.has_source:
            return
        self._state.show_controls()
        self.timer.cancel()
        if self._state.playback is PlaybackStatus.PLAYING:
            self.timer.arm()
        self._notify()

    on_pointer_enter = on_pointer_move

    def on_pointer_leave(self) -> None:
        if not self.has_source:
            return
        if self._state.playback is not PlaybackStatus.PLAYING:
            return
        self.timer.cancel()
        self._state.hide_controls()
        self._notify()

    def _on_controls_idle(self) -> None:
        if self._state.playback is not PlaybackStatus.PLAYING:
            return
        self._state.hide_controls()
        self._notify()

    def _after_transition(self) -> None:
        self._sync_visibility()
        self._notify()

    def _sync_visibility(self) -> None:
        playing = self._state.playback is PlaybackStatus.PLAYING
        if not playing:
            self.timer.cancel()
            self._state.show_controls()
        elif not self._was_playing and self._state.controls_visible:
            self.timer.arm()
        self._was_playing = playing

    def _notify(self) -> None:
        snapshot = self.state
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                self.logger.exception("Player state observer failed")
