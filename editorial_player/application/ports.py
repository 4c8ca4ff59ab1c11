"""Ports the playback coordinator talks to, and the errors they may raise."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Protocol

Unsubscribe = Callable[[], None]


class PlayerError(RuntimeError):
    """Base class for recoverable player failures."""


class MediaElementError(PlayerError):
    """Raised when the media element refuses an operation."""


class FullscreenDeniedError(PlayerError):
    """Raised when the platform refuses to enter or leave fullscreen."""


class MediaEventListener(Protocol):
    """Receiver of native media lifecycle signals."""

    def on_progress(self, seconds: float) -> None: ...

    def on_metadata_ready(self, duration_seconds: float) -> None: ...

    def on_stalled(self) -> None: ...

    def on_resumed(self) -> None: ...


class MediaElementPort(Protocol):
    """The native media element under the control surface."""

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def set_current_time(self, seconds: float) -> None: ...

    def set_volume(self, volume: float) -> None: ...

    def set_muted(self, muted: bool) -> None: ...

    def set_playback_rate(self, rate: float) -> None: ...

    def subscribe(self, listener: MediaEventListener) -> Unsubscribe: ...


class FullscreenPort(Protocol):
    """Window-level fullscreen target shared with the rest of the window."""

    def is_active(self) -> bool: ...

    def request(self) -> None: ...

    def exit(self) -> None: ...

    def subscribe(self, callback: Callable[[bool], None]) -> Unsubscribe: ...


@dataclass(frozen=True)
class KeyEvent:
    key: str
    target: Any = None
    modifiers: frozenset[str] = field(default_factory=frozenset)


class KeySourcePort(Protocol):
    """Global keyboard channel; handlers return True to consume the key."""

    def subscribe(self, handler: Callable[[KeyEvent], bool]) -> Unsubscribe: ...


class SchedulerPort(Protocol):
    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> Hashable: ...

    def cancel(self, token: Hashable) -> None: ...
