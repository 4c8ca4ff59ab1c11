"""Tk implementations of the coordinator ports."""

from __future__ import annotations

import sys
import tkinter as tk
from typing import Any, Callable, Hashable

from ..application.ports import FullscreenDeniedError, KeyEvent, Unsubscribe

# Mod1 is NumLock on Windows, where Alt has its own bit.
_ALT_MASK = 0x20000 if sys.platform.startswith("win") else 0x0008
_MODIFIER_MASKS = ((0x0004, "control"), (_ALT_MASK, "alt"))


def remove_binding(widget: tk.Misc, tag: str, sequence: str, funcid: str) -> None:
    """Drop one ``add="+"`` binding without touching the others on the tag."""
    script = str(widget.tk.call("bind", tag, sequence))
    kept = "\n".join(line for line in script.splitlines() if funcid not in line)
    widget.tk.call("bind", tag, sequence, kept)
    widget.deletecommand(funcid)


def event_modifiers(state: Any) -> frozenset[str]:
    try:
        mask = int(state)
    except (TypeError, ValueError):
        return frozenset()
    return frozenset(name for bit, name in _MODIFIER_MASKS if mask & bit)


class TkScheduler:
    def __init__(self, root: tk.Misc) -> None:
        self.root = root

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> Hashable:
        return self.root.after(max(0, int(round(float(delay_seconds) * 1000.0))), callback)

    def cancel(self, token: Hashable) -> None:
        self.root.after_cancel(token)


class TkKeySource:
    """Window-global ``<KeyPress>`` channel shared with every other widget."""

    def __init__(self, root: tk.Misc, logger) -> None:
        self.root = root
        self.logger = logger

    def _resolve_target(self, widget: Any) -> Any:
        if isinstance(widget, str):
            try:
                return self.root.nametowidget(widget)
            except (KeyError, tk.TclError):
                return widget
        return widget

    def subscribe(self, handler: Callable[[KeyEvent], bool]) -> Unsubscribe:
        def on_key(event: tk.Event) -> str | None:
            key_event = KeyEvent(
                key=str(getattr(event, "keysym", "") or getattr(event, "char", "")),
                target=self._resolve_target(getattr(event, "widget", None)),
                modifiers=event_modifiers(getattr(event, "state", 0)),
            )
            if handler(key_event):
                return "break"
            return None

        funcid = self.root.bind_all("<KeyPress>", on_key, add="+")

        def unsubscribe() -> None:
            remove_binding(self.root, "all", "<KeyPress>", funcid)

        return unsubscribe


class TkFullscreenHost:
    """Fullscreen via the top-level ``-fullscreen`` attribute.

    Change notifications come from ``<Configure>`` on the window: the flag is
    read back from the window manager, never assumed from the request.
    """

    def __init__(self, window: tk.Wm, logger) -> None:
        self.window = window
        self.logger = logger

    def is_active(self) -> bool:
        try:
            return bool(int(self.window.attributes("-fullscreen")))
        except (tk.TclError, TypeError, ValueError):
            return False

    def _set(self, value: bool) -> None:
        try:
            self.window.attributes("-fullscreen", bool(value))
        except tk.TclError as exc:
            raise FullscreenDeniedError(str(exc)) from exc

    def request(self) -> None:
        self._set(True)

    def exit(self) -> None:
        self._set(False)

    def subscribe(self, callback: Callable[[bool], None]) -> Unsubscribe:
        last = {"active": self.is_active()}

        def on_configure(event: tk.Event) -> None:
            if getattr(event, "widget", None) is not self.window:
                return
            active = self.is_active()
            if active == last["active"]:
                return
            last["active"] = active
            self.logger.debug("Window fullscreen changed: %s", active)
            callback(active)

        funcid = self.window.bind("<Configure>", on_configure, add="+")

        def unsubscribe() -> None:
            remove_binding(self.window, str(self.window), "<Configure>", funcid)

        return unsubscribe
