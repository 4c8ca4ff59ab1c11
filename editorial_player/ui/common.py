"""Toolkit-independent presentation helpers."""

from __future__ import annotations

from dataclasses import dataclass

from ..domain.session_state import PLAYBACK_RATES, MediaSessionState, PlaybackStatus
from ..domain.time_format import format_timestamp

APP_TITLE = "Editorial Player"
NO_MEDIA_TITLE = "No video solution available"
NO_MEDIA_HINT = "Check back later for a video explanation."
EDITOR_PLACEHOLDER = "# Write your solution here\n"
VOLUME_SLIDER_STEP = 0.05


def format_rate_label(rate: float) -> str:
    return f"{float(rate):g}x"


def snap_volume(volume: float, step: float = VOLUME_SLIDER_STEP) -> float:
    """Round a slider position to the nearest step, kept inside [0, 1]."""
    snapped = round(round(float(volume) / step) * step, 4)
    return max(0.0, min(1.0, snapped))


RATE_MENU_LABELS: tuple[tuple[float, str], ...] = tuple(
    (rate, format_rate_label(rate)) for rate in PLAYBACK_RATES
)


@dataclass(frozen=True)
class PlayerViewModel:
    has_source: bool
    title: str = ""
    hint: str = ""
    time_label: str = "0:00 / 0:00"
    progress_fraction: float = 0.0
    progress_max: float = 100.0
    play_button_label: str = "Play (k)"
    show_play_overlay: bool = False
    show_buffering: bool = False
    show_muted_icon: bool = False
    volume_slider_value: float = 1.0
    rate_label: str = "1x"
    speed_menu_open: bool = False
    controls_visible: bool = True
    fullscreen_button_label: str = "Fullscreen (f)"


def build_player_view(state: MediaSessionState) -> PlayerViewModel:
    if not state.has_source:
        return PlayerViewModel(has_source=False, title=NO_MEDIA_TITLE, hint=NO_MEDIA_HINT)
    playback = state.playback
    duration = state.duration_seconds
    fraction = 0.0
    if duration > 0:
        fraction = max(0.0, min(1.0, state.current_time_seconds / duration))
    return PlayerViewModel(
        has_source=True,
        time_label=(
            f"{format_timestamp(state.current_time_seconds)} / {format_timestamp(duration)}"
        ),
        progress_fraction=fraction,
        progress_max=duration if duration > 0 else 100.0,
        play_button_label="Pause (k)" if state.is_playing else "Play (k)",
        show_play_overlay=not state.is_playing and playback is not PlaybackStatus.BUFFERING,
        show_buffering=playback is PlaybackStatus.BUFFERING,
        show_muted_icon=state.muted or state.volume == 0,
        volume_slider_value=0.0 if state.muted else state.volume,
        rate_label=format_rate_label(state.playback_rate),
        speed_menu_open=state.speed_menu_open,
        controls_visible=state.controls_visible,
        fullscreen_button_label="Exit fullscreen (f)" if state.fullscreen else "Fullscreen (f)",
    )
