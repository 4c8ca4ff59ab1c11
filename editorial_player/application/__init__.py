"""Application layer orchestration."""

from .commands import (
    Command,
    CommandRouter,
    SeekAbsolute,
    SeekRelative,
    SetPlaybackRate,
    SetVolume,
    ToggleFullscreen,
    ToggleMute,
    TogglePlayPause,
    ToggleSpeedMenu,
    VolumeNudge,
)
from .coordinator import PlaybackCoordinator
from .event_bridge import NativeEventBridge
from .focus_policy import FocusExclusionPolicy, normalize_key
from .ports import (
    FullscreenDeniedError,
    FullscreenPort,
    KeyEvent,
    KeySourcePort,
    MediaElementError,
    MediaElementPort,
    MediaEventListener,
    PlayerError,
    SchedulerPort,
)
from .visibility_timer import ControlVisibilityTimer

__all__ = [
    "Command",
    "CommandRouter",
    "ControlVisibilityTimer",
    "FocusExclusionPolicy",
    "FullscreenDeniedError",
    "FullscreenPort",
    "KeyEvent",
    "KeySourcePort",
    "MediaElementError",
    "MediaElementPort",
    "MediaEventListener",
    "NativeEventBridge",
    "PlaybackCoordinator",
    "PlayerError",
    "SchedulerPort",
    "SeekAbsolute",
    "SeekRelative",
    "SetPlaybackRate",
    "SetVolume",
    "ToggleFullscreen",
    "ToggleMute",
    "TogglePlayPause",
    "ToggleSpeedMenu",
    "VolumeNudge",
    "normalize_key",
]
