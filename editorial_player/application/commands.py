"""Player commands and the router that applies them to session state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..domain.session_state import MediaSessionState
from ..utils import coerce_float
from .ports import FullscreenDeniedError, FullscreenPort, MediaElementError, MediaElementPort


@dataclass(frozen=True)
class TogglePlayPause:
    pass


@dataclass(frozen=True)
class SeekRelative:
    delta_seconds: float


@dataclass(frozen=True)
class SeekAbsolute:
    seconds: float


@dataclass(frozen=True)
class SetVolume:
    volume: float


@dataclass(frozen=True)
class ToggleMute:
    pass


@dataclass(frozen=True)
class SetPlaybackRate:
    rate: float


@dataclass(frozen=True)
class ToggleSpeedMenu:
    pass


@dataclass(frozen=True)
class ToggleFullscreen:
    pass


@dataclass(frozen=True)
class VolumeNudge:
    delta: float


Command = Union[
    TogglePlayPause,
    SeekRelative,
    SeekAbsolute,
    SetVolume,
    ToggleMute,
    SetPlaybackRate,
    ToggleSpeedMenu,
    ToggleFullscreen,
    VolumeNudge,
]


class CommandRouter:
    """Validates commands and writes them through to the element and state.

    Invalid input is clamped or dropped; platform refusals are logged and
    leave the state as it was. Nothing here raises to the caller.
    """

    def __init__(
        self,
        *,
        state: MediaSessionState,
        element: MediaElementPort,
        fullscreen: FullscreenPort,
        logger,
    ) -> None:
        self._state = state
        self._element = element
        self._fullscreen = fullscreen
        self.logger = logger

    def apply(self, command: Command) -> bool:
        """Apply command; return True when it changed or drove anything."""
        if not self._state.has_source:
            return False
        handler = getattr(self, f"_apply_{type(command).__name__}", None)
        if handler is None:
            self.logger.debug("Ignoring unknown command: %r", command)
            return False
        return bool(handler(command))

    def _apply_TogglePlayPause(self, _command: TogglePlayPause) -> bool:
        if self._state.is_playing:
            try:
                self._element.pause()
            except MediaElementError:
                self.logger.exception("Media element refused to pause")
                return False
            self._state.mark_paused()
            return True
        try:
            self._element.play()
        except MediaElementError:
            self.logger.exception("Media element refused to play")
            return False
        self._state.mark_playing()
        return True

    def _apply_SeekRelative(self, command: SeekRelative) -> bool:
        delta = coerce_float(command.delta_seconds, default=0.0)
        return self._seek(self._state.current_time_seconds + delta)

    def _apply_SeekAbsolute(self, command: SeekAbsolute) -> bool:
        return self._seek(command.seconds)

    def _seek(self, seconds: float) -> bool:
        target = self._state.clamp_seek_target(seconds)
        try:
            self._element.set_current_time(target)
        except MediaElementError:
            self.logger.exception("Media element refused to seek to %.3f", target)
            return False
        self._state.seek_to(target)
        return True

    def _apply_SetVolume(self, command: SetVolume) -> bool:
        self._state.set_volume(command.volume)
        self._sync_element_volume()
        return True

    def _apply_ToggleMute(self, _command: ToggleMute) -> bool:
        self._state.toggle_mute()
        self._sync_element_volume()
        return True

    def _apply_VolumeNudge(self, command: VolumeNudge) -> bool:
        self._state.nudge_volume(command.delta)
        self._sync_element_volume()
        return True

    def _sync_element_volume(self) -> None:
        try:
            self._element.set_volume(self._state.volume)
            self._element.set_muted(self._state.muted)
        except MediaElementError:
            self.logger.exception("Failed to update media element volume")

    def _apply_SetPlaybackRate(self, command: SetPlaybackRate) -> bool:
        if not self._state.set_playback_rate(command.rate):
            self.logger.debug("Rejected playback rate outside the allowed set: %r", command.rate)
            return False
        try:
            self._element.set_playback_rate(self._state.playback_rate)
        except MediaElementError:
            self.logger.exception("Failed to update media element playback rate")
        return True

    def _apply_ToggleSpeedMenu(self, _command: ToggleSpeedMenu) -> bool:
        self._state.toggle_speed_menu()
        return True

    def _apply_ToggleFullscreen(self, _command: ToggleFullscreen) -> bool:
        # The fullscreen flag is written by the platform change signal only.
        try:
            if self._fullscreen.is_active():
                self._fullscreen.exit()
            else:
                self._fullscreen.request()
        except FullscreenDeniedError as exc:
            self.logger.warning("Fullscreen request was refused: %s", exc)
            return False
        return True
