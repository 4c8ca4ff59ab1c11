"""libVLC-backed media element used under the Tk control surface."""

from __future__ import annotations

import os
import sys
from typing import Any, Callable

from ..application.ports import MediaElementError, MediaEventListener, Unsubscribe

try:
    import vlc as _vlc
except Exception:  # pragma: no cover - dependency optional at import time
    _vlc = None

Dispatch = Callable[[Callable[[], None]], None]


def _inline_dispatch(callback: Callable[[], None]) -> None:
    callback()


class VlcMediaElement:
    """Thin python-vlc wrapper exposing the media element port.

    libVLC raises its events on an internal thread; every event is handed
    to ``dispatch`` so listeners run on the UI thread.
    """

    _EVENT_NAMES = (
        "MediaPlayerTimeChanged",
        "MediaPlayerLengthChanged",
        "MediaPlayerBuffering",
        "MediaPlayerPlaying",
    )

    def __init__(
        self,
        *,
        logger,
        dispatch: Dispatch | None = None,
        vlc_module=None,
        platform_name: str | None = None,
    ) -> None:
        self._vlc = vlc_module if vlc_module is not None else _vlc
        if self._vlc is None:
            raise RuntimeError("python-vlc is not available")
        self.logger = logger
        self._dispatch = dispatch or _inline_dispatch
        self.platform_name = platform_name if platform_name is not None else sys.platform
        args = ["--no-xlib"] if str(self.platform_name).startswith("linux") else []
        self.instance = self._vlc.Instance(args)
        self.player = self.instance.media_player_new()
        self.media = None
        self._listeners: list[MediaEventListener] = []
        self._events_attached = False

    def load(self, source: str) -> None:
        target = str(source or "").strip()
        if not target:
            raise MediaElementError("No media source was given.")
        if "://" not in target:
            if not os.path.isfile(target):
                raise MediaElementError(f"Media file does not exist: {target}")
            target = os.path.abspath(target)
        self._release_media()
        media = self.instance.media_new(target)
        self.player.set_media(media)
        self.media = media

    def attach_window(self, handle: int) -> None:
        # Pointer and key input stay with the host window.
        self.player.video_set_mouse_input(False)
        self.player.video_set_key_input(False)
        if str(self.platform_name).startswith("win"):
            self.player.set_hwnd(handle)
        elif self.platform_name == "darwin":
            self.player.set_nsobject(handle)
        else:
            self.player.set_xwindow(handle)

    def play(self) -> None:
        rc = int(self.player.play())
        if rc == -1:
            raise MediaElementError("VLC failed to start playback.")

    def pause(self) -> None:
        self.player.set_pause(1)

    def set_current_time(self, seconds: float) -> None:
        self.player.set_time(int(round(max(0.0, float(seconds)) * 1000.0)))

    def set_volume(self, volume: float) -> None:
        level = int(round(max(0.0, min(1.0, float(volume))) * 100.0))
        if self.player.audio_set_volume(level) == -1:
            raise MediaElementError("VLC rejected the volume level.")

    def set_muted(self, muted: bool) -> None:
        self.player.audio_set_mute(bool(muted))

    def set_playback_rate(self, rate: float) -> None:
        if self.player.set_rate(float(rate)) == -1:
            raise MediaElementError(f"VLC rejected playback rate {rate}.")

    def subscribe(self, listener: MediaEventListener) -> Unsubscribe:
        self._listeners.append(listener)
        if not self._events_attached:
            self._attach_events()

        def unsubscribe() -> None:
            self._listeners = [item for item in self._listeners if item is not listener]
            if not self._listeners:
                self._detach_events()

        return unsubscribe

    def _attach_events(self) -> None:
        manager = self.player.event_manager()
        event_type = self._vlc.EventType
        manager.event_attach(event_type.MediaPlayerTimeChanged, self._on_time_changed)
        manager.event_attach(event_type.MediaPlayerLengthChanged, self._on_length_changed)
        manager.event_attach(event_type.MediaPlayerBuffering, self._on_buffering)
        manager.event_attach(event_type.MediaPlayerPlaying, self._on_playing)
        self._events_attached = True

    def _detach_events(self) -> None:
        if not self._events_attached:
            return
        manager = self.player.event_manager()
        for name in self._EVENT_NAMES:
            try:
                manager.event_detach(getattr(self._vlc.EventType, name))
            except Exception:
                self.logger.exception("Failed to detach VLC event %s", name)
        self._events_attached = False

    def _emit(self, method: str, *args: Any) -> None:
        for listener in list(self._listeners):
            getattr(listener, method)(*args)

    def _on_time_changed(self, event) -> None:
        seconds = float(event.u.new_time) / 1000.0
        self._dispatch(lambda: self._emit("on_progress", seconds))

    def _on_length_changed(self, event) -> None:
        seconds = float(event.u.new_length) / 1000.0
        self._dispatch(lambda: self._emit("on_metadata_ready", seconds))

    def _on_buffering(self, event) -> None:
        if float(event.u.new_cache) < 100.0:
            self._dispatch(lambda: self._emit("on_stalled"))
        else:
            self._dispatch(lambda: self._emit("on_resumed"))

    def _on_playing(self, _event) -> None:
        self._dispatch(lambda: self._emit("on_resumed"))

    def _release_media(self) -> None:
        if self.media is None:
            return
        try:
            self.media.release()
        except Exception:
            self.logger.debug("VLC media was already released")
        self.media = None

    def release(self) -> None:
        self._detach_events()
        self._listeners = []
        try:
            self.player.stop()
        except Exception:
            self.logger.exception("Failed to stop VLC player")
        self._release_media()
        try:
            self.player.release()
        except Exception:
            self.logger.exception("Failed to release VLC player")
        try:
            self.instance.release()
        except Exception:
            self.logger.exception("Failed to release VLC instance")
