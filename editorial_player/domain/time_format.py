"""Timestamp formatting for the player time label."""

from __future__ import annotations

import math
from typing import Optional


def format_timestamp(seconds: Optional[float]) -> str:
    """Render seconds as ``M:SS``; minutes unpadded, seconds truncated."""
    if not seconds:
        return "0:00"
    try:
        value = float(seconds)
    except (TypeError, ValueError):
        return "0:00"
    if not math.isfinite(value) or value <= 0:
        return "0:00"
    minutes = math.floor(value / 60)
    secs = math.floor(value % 60)
    return f"{minutes}:{secs:02d}"
