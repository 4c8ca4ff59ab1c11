"""In-memory playback state for one media session and its transitions."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from ..utils import coerce_float

PLAYBACK_RATES: tuple[float, ...] = (0.5, 0.75, 1.0, 1.25, 1.5, 2.0)


class PlaybackStatus(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    BUFFERING = "buffering"


def match_playback_rate(rate: object) -> float | None:
    """Return the canonical member of PLAYBACK_RATES equal to rate, or None."""
    if isinstance(rate, bool):
        return None
    try:
        value = float(rate)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    for allowed in PLAYBACK_RATES:
        if math.isclose(value, allowed, abs_tol=1e-9):
            return allowed
    return None


@dataclass(slots=True)
class MediaSessionState:
    """Authoritative playback record.

    Fields are written only through the methods below. ``is_playing`` is the
    play intent set by commands; ``playback`` is the derived status shown to
    the user, where a stall overlays the intent without replacing it.
    """

    has_source: bool = False
    is_playing: bool = False
    has_started: bool = False
    is_buffering: bool = False
    current_time_seconds: float = 0.0
    duration_seconds: float = 0.0
    volume: float = 1.0
    muted: bool = False
    playback_rate: float = 1.0
    fullscreen: bool = False
    controls_visible: bool = True
    speed_menu_open: bool = False

    @classmethod
    def for_source(cls, source: str | None, *, known_duration: float | None = None):
        state = cls(has_source=bool(source))
        if state.has_source and known_duration:
            state.duration_seconds = coerce_float(known_duration, default=0.0, min_value=0.0)
        return state

    @property
    def playback(self) -> PlaybackStatus:
        if not self.has_source:
            return PlaybackStatus.IDLE
        if self.is_buffering:
            return PlaybackStatus.BUFFERING
        if self.is_playing:
            return PlaybackStatus.PLAYING
        if self.has_started:
            return PlaybackStatus.PAUSED
        return PlaybackStatus.IDLE

    @property
    def effective_volume(self) -> float:
        return 0.0 if self.muted else self.volume

    def clamp_time(self, seconds: float) -> float:
        """Clamp into [0, duration]; the upper bound applies once duration is known."""
        value = coerce_float(seconds, default=self.current_time_seconds, min_value=0.0)
        if self.duration_seconds > 0:
            value = min(value, self.duration_seconds)
        return value

    def clamp_seek_target(self, seconds: float) -> float:
        value = coerce_float(seconds, default=self.current_time_seconds, min_value=0.0)
        return min(value, self.duration_seconds)

    # Native element signals.

    def apply_progress(self, seconds: float) -> None:
        self.current_time_seconds = self.clamp_time(seconds)

    def apply_duration(self, seconds: float) -> bool:
        value = coerce_float(seconds, default=0.0)
        if value <= 0:
            return False
        self.duration_seconds = value
        self.current_time_seconds = self.clamp_time(self.current_time_seconds)
        return True

    def set_buffering(self, buffering: bool) -> None:
        self.is_buffering = bool(buffering)

    def set_fullscreen(self, fullscreen: bool) -> None:
        self.fullscreen = bool(fullscreen)

    # Command transitions.

    def mark_playing(self) -> None:
        self.is_playing = True
        self.has_started = True

    def mark_paused(self) -> None:
        self.is_playing = False

    def seek_to(self, seconds: float) -> float:
        self.current_time_seconds = self.clamp_seek_target(seconds)
        return self.current_time_seconds

    def set_volume(self, volume: float) -> None:
        self.volume = coerce_float(volume, default=self.volume, min_value=0.0, max_value=1.0)
        self.muted = self.volume == 0

    def toggle_mute(self) -> None:
        self.muted = not self.muted
        if not self.muted:
            # Unmute restores full volume, not the last non-zero level.
            self.volume = 1.0

    def nudge_volume(self, delta: float) -> None:
        step = coerce_float(delta, default=0.0)
        self.volume = round(
            coerce_float(self.volume + step, default=self.volume, min_value=0.0, max_value=1.0),
            4,
        )
        if step > 0:
            self.muted = False

    def set_playback_rate(self, rate: float) -> bool:
        allowed = match_playback_rate(rate)
        if allowed is None:
            return False
        self.playback_rate = allowed
        self.speed_menu_open = False
        return True

    def toggle_speed_menu(self) -> None:
        self.speed_menu_open = not self.speed_menu_open

    # Control visibility.

    def show_controls(self) -> None:
        self.controls_visible = True

    def hide_controls(self) -> None:
        self.controls_visible = False
        self.speed_menu_open = False
