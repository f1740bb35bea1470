"""Terminal colours and human-friendly formatting."""

from __future__ import annotations

from datetime import timedelta

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
GRAY = "\033[90m"

# Five-tier scale used by the dashboard, from empty to busiest day.
COLOR0 = "\033[38;5;250m"
BLUE1 = "\033[38;5;117m"
BLUE2 = "\033[38;5;75m"
BLUE3 = "\033[38;5;33m"
BLUE4 = "\033[38;5;21m"

_MICROS_PER_SECOND = 1_000_000
_MICROS_PER_MINUTE = 60 * _MICROS_PER_SECOND
_MICROS_PER_HOUR = 60 * _MICROS_PER_MINUTE


def _truncating_div(value: int, divisor: int) -> int:
    """Integer division that rounds toward zero."""
    quotient = abs(value) // divisor
    return -quotient if value < 0 else quotient


def format_duration(d: timedelta) -> str:
    """Render a duration as '2h 30m', '5m' or '45s'."""
    micros = d // timedelta(microseconds=1)
    hours = _truncating_div(micros, _MICROS_PER_HOUR)
    total_minutes = _truncating_div(micros, _MICROS_PER_MINUTE)
    minutes = total_minutes - 60 * _truncating_div(total_minutes, 60)

    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m"
    return f"{_truncating_div(micros, _MICROS_PER_SECOND)}s"


def show_version(version: str, commit: str, date: str) -> None:
    """Print version information, omitting unknown build details."""
    print(f"Flow {version}")
    if commit != "none":
        print(f"Commit: {commit}")
    if date != "unknown":
        print(f"Built: {date}")