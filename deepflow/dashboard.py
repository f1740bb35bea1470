"""A yearly contribution graph of focus time."""

from __future__ import annotations

import itertools
import sys
from datetime import date, datetime, time, timedelta, timezone

from .logs import LogReader
from .session import ZERO_TIME
from .ui import (
    BLUE1,
    BLUE2,
    BLUE3,
    BLUE4,
    BOLD,
    COLOR0,
    RESET,
    format_duration,
)

_WEEKS = 52
_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_DAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.astimezone()


def _one_year_before(moment: datetime) -> datetime:
    try:
        return moment.replace(year=moment.year - 1)
    except ValueError:
        # 29 February rolls over to 1 March in a non-leap year.
        return moment.replace(year=moment.year - 1, month=3, day=1)


def _days_since_sunday(day: date) -> int:
    return (day.weekday() + 1) % 7


def _cell_color(total: timedelta) -> str:
    if total >= timedelta(hours=6):
        return BLUE4
    if total >= timedelta(hours=4):
        return BLUE3
    if total >= timedelta(hours=2):
        return BLUE2
    if total > timedelta(0):
        return BLUE1
    return COLOR0


def handle_dashboard() -> None:
    """Print the contribution graph and yearly statistics for the logged sessions."""
    try:
        reader = LogReader.from_environment()
    except OSError as exc:
        print(f"Error creating log reader: {exc}", file=sys.stderr)
        return
    try:
        entries = reader.read_all_entries()
    except OSError as exc:
        print(f"Error reading log entries: {exc}", file=sys.stderr)
        return

    if not entries:
        print("No sessions logged. Use 'flow start' to begin.")
        return

    now = datetime.now().astimezone()
    cutoff = _one_year_before(now)
    daily_totals: dict[date, timedelta] = {}
    for entry in entries:
        end = entry.end_time
        if end == ZERO_TIME or _aware(end) <= cutoff:
            continue
        day = end.date()
        daily_totals[day] = daily_totals.get(day, timedelta(0)) + entry.duration

    render_contribution_graph(daily_totals, now)
    display_dashboard_stats(daily_totals, now)


def render_contribution_graph(daily_totals: dict[date, timedelta], now: datetime) -> None:
    """Print a 52-week grid, one row per weekday, coloured by focus time."""
    today = now.date()
    last_sunday = today - timedelta(days=_days_since_sunday(today))
    graph_start = last_sunday - timedelta(weeks=_WEEKS - 1)

    print(f"\n{BOLD}Your Deep Work History (Last Year){RESET}")

    header = [" "] * (_WEEKS * 2)
    last_month = 0
    for week in range(_WEEKS):
        month = (graph_start + timedelta(days=week * 7 + 3)).month
        if month != last_month:
            position = week * 2
            for offset, char in enumerate(_MONTH_ABBR[month - 1]):
                if position + offset < len(header):
                    header[position + offset] = char
            last_month = month
    print(f"     {''.join(header)}")

    for day_of_week, label in enumerate(_DAY_LABELS):
        shown = label if day_of_week % 2 else " "
        cells = "".join(
            f"{_cell_color(daily_totals.get(graph_start + timedelta(days=week * 7 + day_of_week), timedelta(0)))}■ {RESET}"
            for week in range(_WEEKS)
        )
        print(f"{shown:<3}  {cells}")

    legend = " ".join(f"{color}■{RESET}" for color in (COLOR0, BLUE1, BLUE2, BLUE3, BLUE4))
    print(f"\n  Less {legend} More")
    print()


def display_dashboard_stats(daily_totals: dict[date, timedelta], now: datetime) -> None:
    """Print the yearly total, the daily average and the current streak."""
    cutoff = _aware(_one_year_before(now))
    total = sum(daily_totals.values(), timedelta(0))
    average = total / 365 if total > timedelta(0) else timedelta(0)

    today = now.date()
    streak = 0
    for offset in itertools.count():
        day = today - timedelta(days=offset)
        if datetime.combine(day, time(0), tzinfo=timezone.utc) < cutoff:
            break
        if daily_totals.get(day, timedelta(0)) <= timedelta(0):
            break
        streak += 1

    print(f"{BOLD}Yearly Stats{RESET}")
    print(f"  Total Focus Time: {format_duration(total)}")
    print(f"  Daily Average:    {format_duration(average)}")
    print(f"  Current Streak:   {streak} days")
    print()