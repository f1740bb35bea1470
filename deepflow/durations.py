"""Parsing and printing of durations in the '1h30m' notation."""

from __future__ import annotations

import re
from datetime import timedelta
from decimal import Decimal

_UNIT_NANOS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_NUMBER = r"(?:\d+\.?\d*|\.\d+)"
_UNIT = r"(?:ns|us|µs|μs|ms|s|m|h)"
_BODY_RE = re.compile(rf"(?:{_NUMBER}{_UNIT})+")
_PART_RE = re.compile(rf"({_NUMBER})({_UNIT})")
_MAX_NANOS = 2**63 - 1


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as '4h', '3h30m' or '-1.5s'.

    Raises ValueError for anything that is not a valid duration.
    """
    original = text
    sign = 1
    if text[:1] in ("-", "+"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f"invalid duration {original!r}")
    if not _BODY_RE.fullmatch(text):
        raise ValueError(f"invalid duration {original!r}")

    total = Decimal(0)
    for number, unit in _PART_RE.findall(text):
        total += Decimal(number) * _UNIT_NANOS[unit]
    nanos = int(total)
    if nanos > _MAX_NANOS:
        raise ValueError(f"invalid duration {original!r}")
    return sign * timedelta(microseconds=nanos // 1000)


def _with_fraction(value: int, scale: int) -> str:
    whole, fraction = divmod(value, scale)
    if not fraction:
        return str(whole)
    digits = len(str(scale)) - 1
    return f"{whole}.{fraction:0{digits}d}".rstrip("0")


def format_go_duration(d: timedelta) -> str:
    """Render a duration in the compact form accepted by parse_duration."""
    micros = d // timedelta(microseconds=1)
    sign = "-" if micros < 0 else ""
    micros = abs(micros)
    if micros == 0:
        return "0s"
    if micros < 1_000:
        return f"{sign}{micros}µs"
    if micros < 1_000_000:
        return f"{sign}{_with_fraction(micros, 1_000)}ms"

    hours, rest = divmod(micros, 3_600_000_000)
    minutes, rest = divmod(rest, 60_000_000)
    seconds = _with_fraction(rest, 1_000_000)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"