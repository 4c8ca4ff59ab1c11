"""Domain logic for playback state."""

from .session_state import (
    PLAYBACK_RATES,
    MediaSessionState,
    PlaybackStatus,
    match_playback_rate,
)
from .time_format import format_timestamp

__all__ = [
    "PLAYBACK_RATES",
    "MediaSessionState",
    "PlaybackStatus",
    "format_timestamp",
    "match_playback_rate",
]
