"""Shared fakes for the player engine tests.

The fakes record every call so tests can assert what reached the media
element, the fullscreen host and the scheduler.
"""

from __future__ import annotations

import pytest

from editorial_player.application.coordinator import PlaybackCoordinator
from editorial_player.application.ports import FullscreenDeniedError, MediaElementError


class RecordingLogger:
    def __init__(self):
        self.debugs = []
        self.infos = []
        self.warnings = []
        self.exceptions = []

    def debug(self, message, *args):
        self.debugs.append(message % args if args else message)

    def info(self, message, *args):
        self.infos.append(message % args if args else message)

    def warning(self, message, *args):
        self.warnings.append(message % args if args else message)

    def exception(self, message, *args):
        self.exceptions.append(message % args if args else message)


class ManualScheduler:
    """Clock-driven scheduler: nothing fires until ``advance`` is called."""

    def __init__(self):
        self.now = 0.0
        self._next_token = 0
        self.pending = {}

    def call_later(self, delay_seconds, callback):
        self._next_token += 1
        token = f"after#{self._next_token}"
        self.pending[token] = (self.now + float(delay_seconds), callback)
        return token

    def cancel(self, token):
        self.pending.pop(token, None)

    def advance(self, seconds):
        target = self.now + float(seconds)
        while True:
            due = [
                (deadline, token)
                for token, (deadline, _callback) in self.pending.items()
                if deadline <= target
            ]
            if not due:
                break
            deadline, token = min(due)
            _deadline, callback = self.pending.pop(token)
            self.now = deadline
            callback()
        self.now = target


class FakeElement:
    def __init__(self):
        self.calls = []
        self.listeners = []
        self.fail_play = False
        self.fail_pause = False
        self.fail_seek = False

    def play(self):
        if self.fail_play:
            raise MediaElementError("autoplay refused")
        self.calls.append(("play",))

    def pause(self):
        if self.fail_pause:
            raise MediaElementError("pause refused")
        self.calls.append(("pause",))

    def set_current_time(self, seconds):
        if self.fail_seek:
            raise MediaElementError("seek refused")
        self.calls.append(("set_current_time", seconds))

    def set_volume(self, volume):
        self.calls.append(("set_volume", volume))

    def set_muted(self, muted):
        self.calls.append(("set_muted", muted))

    def set_playback_rate(self, rate):
        self.calls.append(("set_playback_rate", rate))

    def subscribe(self, listener):
        self.listeners.append(listener)

        def unsubscribe():
            self.listeners.remove(listener)

        return unsubscribe


class FakeFullscreen:
    def __init__(self, active=False):
        self.active = active
        self.deny = False
        self.requests = []
        self.callbacks = []

    def is_active(self):
        return self.active

    def request(self):
        if self.deny:
            raise FullscreenDeniedError("not allowed")
        self.requests.append("request")

    def exit(self):
        if self.deny:
            raise FullscreenDeniedError("not allowed")
        self.requests.append("exit")

    def subscribe(self, callback):
        self.callbacks.append(callback)

        def unsubscribe():
            self.callbacks.remove(callback)

        return unsubscribe

    def emit(self, active):
        self.active = active
        for callback in list(self.callbacks):
            callback(active)


class FakeKeySource:
    def __init__(self):
        self.handlers = []
        self.fail_subscribe = False

    def subscribe(self, handler):
        if self.fail_subscribe:
            raise RuntimeError("key channel unavailable")
        self.handlers.append(handler)

        def unsubscribe():
            self.handlers.remove(handler)

        return unsubscribe

    def press(self, event):
        return [handler(event) for handler in list(self.handlers)]


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def element():
    return FakeElement()


@pytest.fixture
def fullscreen():
    return FakeFullscreen()


@pytest.fixture
def key_source():
    return FakeKeySource()


@pytest.fixture
def make_coordinator(element, fullscreen, key_source, scheduler, logger):
    def factory(source="https://cdn.example.com/editorial.mp4", **kwargs):
        kwargs.setdefault("element", element)
        return PlaybackCoordinator(
            source=source,
            fullscreen=fullscreen,
            key_source=key_source,
            scheduler=scheduler,
            logger=logger,
            **kwargs,
        )

    return factory
