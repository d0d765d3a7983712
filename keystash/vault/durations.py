"""
Duration hints for credential expiry.

Accepts the compact form written by the CLI layer and by token helpers:
"90s", "15m", "1h", "1h30m", "1.5h", "250ms", "7d". A bare number is seconds.
"""

from __future__ import annotations

import re
from datetime import timedelta

_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
    "d": 86400.0,
}

# Longest units first so "ms" is not read as "m" followed by "s"
_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h|d)")
_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def parse_duration(text: str) -> timedelta:
    """Parse a duration string into a timedelta. Raises ValueError if malformed."""
    s = text.strip()
    if not s:
        raise ValueError("empty duration")

    sign = 1
    if s[0] in "+-":
        sign = -1 if s[0] == "-" else 1
        s = s[1:]

    if _NUMBER.fullmatch(s):
        return timedelta(seconds=sign * float(s))

    pos = 0
    total = 0.0
    for match in _PART.finditer(s):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()
    if pos == 0 or pos != len(s):
        raise ValueError(f"invalid duration: {text!r}")
    return timedelta(seconds=sign * total)


def format_duration(delta: timedelta) -> str:
    """Render a timedelta compactly, e.g. '1h30m', '45s', '2d3h'."""
    seconds = int(delta.total_seconds())
    if seconds == 0:
        return "0s"
    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)
    parts = []
    for unit, size in (("d", 86400), ("h", 3600), ("m", 60), ("s", 1)):
        n, seconds = divmod(seconds, size)
        if n:
            parts.append(f"{n}{unit}")
    return sign + "".join(parts)
