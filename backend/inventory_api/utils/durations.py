"""Parse human-readable lifetimes such as ``7d`` or ``12h``."""

from __future__ import annotations

import re
from datetime import timedelta

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)
_UNIT_SECONDS = {
    "": 1,
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 24 * 60 * 60,
    "w": 7 * 24 * 60 * 60,
}


def parse_duration(value: str | int) -> timedelta:
    """Convert ``"7d"``, ``"30m"``, ``"45s"`` or a bare number of seconds to a timedelta."""
    if isinstance(value, int):
        if value <= 0:
            raise ValueError("Duration must be positive")
        return timedelta(seconds=value)

    match = _DURATION_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid duration '{value}'. Use forms like 7d, 12h, 30m, 45s")

    amount = int(match.group(1))
    if amount <= 0:
        raise ValueError("Duration must be positive")
    return timedelta(seconds=amount * _UNIT_SECONDS[match.group(2).lower()])
