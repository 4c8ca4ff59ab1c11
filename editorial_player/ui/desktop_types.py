"""Desktop player interfaces."""

from __future__ import annotations

from typing import Protocol


class PlayerApp(Protocol):
    """Desktop player contract."""

    title: str

    def launch(self) -> None:
        """Start the UI main loop."""

    def close(self) -> None:
        """Tear down the playback session and the window."""
