"""Human-readable duration parsing.

Durations are carried as float seconds. Numbers are taken as seconds;
strings use unit suffixes (``ns``, ``us``, ``ms``, ``s``, ``m``, ``h``) and
may combine several terms, e.g. ``"1h30m"`` or ``"1.5s"``.
"""

from __future__ import annotations

import re
from typing import Any

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_TERM = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: Any) -> float:
    """Return ``value`` as seconds.

    Raises:
        ValueError: for negative numbers, unknown units or malformed strings.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration {value!r}")
    if isinstance(value, (int, float)):
        if value < 0:
            raise ValueError(f"duration must not be negative: {value!r}")
        return float(value)
    if not isinstance(value, str):
        raise ValueError(f"duration must be a number of seconds or a string, got {type(value).__name__}")

    text = value.strip()
    if not text:
        raise ValueError("empty duration string")
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if seconds < 0:
            raise ValueError(f"duration must not be negative: {value!r}")
        return seconds

    total = 0.0
    pos = 0
    for match in _TERM.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()
    if pos != len(text):
        raise ValueError(f"invalid duration string {value!r}")
    return total


def format_duration(seconds: float) -> str:
    """Compact string form used when dumping configuration (``"1m30s"``, ``"500ms"``)."""
    if seconds < 1:
        return f"{round(seconds * 1000)}ms"
    whole = int(seconds)
    frac = seconds - whole
    hours, rest = divmod(whole, 3600)
    minutes, secs = divmod(rest, 60)
    out = ""
    if hours:
        out += f"{hours}h"
    if minutes:
        out += f"{minutes}m"
    if secs or frac or not out:
        out += f"{secs + frac:g}s"
    return out


__all__ = ["parse_duration", "format_duration"]
