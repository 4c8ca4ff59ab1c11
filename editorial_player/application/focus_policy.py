"""Keyboard shortcut mapping guarded by the foreign-input exclusion check."""

from __future__ import annotations

from typing import Any, Callable, Optional

from .commands import (
    Command,
    SeekRelative,
    ToggleFullscreen,
    ToggleMute,
    TogglePlayPause,
    VolumeNudge,
)
from .ports import KeyEvent

TEXT_INPUT_CLASSES = frozenset(
    {
        "entry",
        "tentry",
        "ttk::entry",
        "text",
        "spinbox",
        "tspinbox",
        "ttk::spinbox",
        "tcombobox",
        "ttk::combobox",
    }
)
BLOCKING_MODIFIERS = frozenset({"control", "alt", "command", "meta"})

_KEY_ALIASES = {
    "arrowleft": "left",
    "arrowright": "right",
    "arrowup": "up",
    "arrowdown": "down",
}


def _default_parent(widget: Any) -> Any:
    return getattr(widget, "master", None)


def _widget_class(widget: Any) -> str:
    winfo_class = getattr(widget, "winfo_class", None)
    if not callable(winfo_class):
        return ""
    try:
        return str(winfo_class()).lower()
    except Exception:
        return ""


def normalize_key(key: str) -> str:
    text = str(key or "")
    if text == " ":
        return "space"
    lowered = text.strip().lower()
    return _KEY_ALIASES.get(lowered, lowered)


class FocusExclusionPolicy:
    """Decides whether a global key event belongs to the player at all.

    Foreign-input regions are registered explicitly (an embedded code editor,
    a chat box); native text fields are recognised by widget class. A target
    that is a region or sits anywhere below one is foreign.
    """

    def __init__(
        self,
        *,
        seek_step_seconds: float = 5.0,
        volume_step: float = 0.1,
        parent_of: Callable[[Any], Any] = _default_parent,
    ) -> None:
        self._regions: list[Any] = []
        self._parent_of = parent_of
        self._keymap: dict[str, Command] = {
            "space": TogglePlayPause(),
            "k": TogglePlayPause(),
            "left": SeekRelative(-float(seek_step_seconds)),
            "right": SeekRelative(float(seek_step_seconds)),
            "up": VolumeNudge(float(volume_step)),
            "down": VolumeNudge(-float(volume_step)),
            "f": ToggleFullscreen(),
            "m": ToggleMute(),
        }

    def register_region(self, region: Any) -> Callable[[], None]:
        self._regions.append(region)

        def unregister() -> None:
            self.unregister_region(region)

        return unregister

    def unregister_region(self, region: Any) -> None:
        self._regions = [item for item in self._regions if item is not region]

    def is_foreign_target(self, target: Any) -> bool:
        if target is None:
            return False
        if _widget_class(target) in TEXT_INPUT_CLASSES:
            return True
        seen: set[int] = set()
        node = target
        while node is not None and id(node) not in seen:
            seen.add(id(node))
            if any(node is region for region in self._regions):
                return True
            node = self._parent_of(node)
        return False

    def command_for(self, event: KeyEvent) -> Optional[Command]:
        """Return the command for event, or None when it must be left alone."""
        if self.is_foreign_target(event.target):
            return None
        if BLOCKING_MODIFIERS.intersection(mod.lower() for mod in event.modifiers):
            return None
        return self._keymap.get(normalize_key(event.key))
