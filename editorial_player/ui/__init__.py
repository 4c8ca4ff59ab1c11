"""User interface layer."""

from .common import (
    APP_TITLE,
    NO_MEDIA_HINT,
    NO_MEDIA_TITLE,
    PlayerViewModel,
    build_player_view,
    format_rate_label,
)
from .desktop_types import PlayerApp
from .tkinter_app import create_tkinter_app

__all__ = [
    "APP_TITLE",
    "NO_MEDIA_HINT",
    "NO_MEDIA_TITLE",
    "PlayerApp",
    "PlayerViewModel",
    "build_player_view",
    "create_tkinter_app",
    "format_rate_label",
]
