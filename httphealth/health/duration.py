"""Duration strings for cache TTLs ("5m", "1h30m", "1.5h", "90s")."""

from __future__ import annotations

import re
from typing import Any

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

# longest units first so "ms" is not read as "m" + "s"
_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: Any) -> int:
    """Parse a duration string into whole seconds.

    Raises ValueError for unit-less numbers, negative values, unknown units
    and anything shorter than one second.
    """
    if not isinstance(value, str):
        raise ValueError(f"duration must be a string like '5m', got {value!r}")

    text = value.strip()
    if not text:
        raise ValueError("empty duration")
    if text.startswith("-"):
        raise ValueError(f"negative duration: {value!r}")
    if text.startswith("+"):
        text = text[1:]

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _PART.match(text, pos)
        if not match:
            raise ValueError(f"invalid duration {value!r} (expected e.g. '30s', '5m', '1h30m')")
        total += float(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()

    seconds = int(total)
    if seconds < 1:
        raise ValueError(f"duration {value!r} is shorter than one second")
    return seconds
