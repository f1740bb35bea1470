"""Patterns in the session history: busiest weekday and top activities."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Sequence

from .logs import LogReader
from .session import LogEntry
from .ui import format_duration

MIN_SESSIONS = 10
TOP_ACTIVITY_COUNT = 3

# Indexed by datetime.weekday(), Monday first.
_WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_RULE = "----------------------------------------------------"


@dataclass
class InsightActivity:
    """Time spent on one tag and its share of the total."""

    tag: str
    duration: timedelta
    percent: int


@dataclass
class InsightReport:
    """Summary of work patterns over a set of sessions."""

    total_sessions: int = 0
    total_time: timedelta = timedelta(0)
    avg_session_length: timedelta = timedelta(0)
    busiest_day: str = "Sunday"
    busiest_day_avg: timedelta = timedelta(0)
    other_days_avg: timedelta = timedelta(0)
    top_activities: list[InsightActivity] = field(default_factory=list)


def calculate_insights(entries: Sequence[LogEntry]) -> InsightReport:
    """Compute the insight report for ``entries``."""
    report = InsightReport(total_sessions=len(entries))
    if not entries:
        return report

    day_totals: dict[str, timedelta] = {}
    day_counts: dict[str, int] = {}
    tag_totals: dict[str, timedelta] = {}
    for entry in entries:
        day = _WEEKDAY_NAMES[entry.end_time.weekday()]
        report.total_time += entry.duration
        day_totals[day] = day_totals.get(day, timedelta(0)) + entry.duration
        day_counts[day] = day_counts.get(day, 0) + 1
        tag_totals[entry.tag] = tag_totals.get(entry.tag, timedelta(0)) + entry.duration

    report.avg_session_length = report.total_time // len(entries)

    busiest_total = timedelta(0)
    for day, total in day_totals.items():
        if total > busiest_total:
            busiest_total = total
            report.busiest_day = day

    busiest_time = day_totals.get(report.busiest_day, timedelta(0))
    busiest_count = day_counts.get(report.busiest_day, 0)
    if busiest_count:
        report.busiest_day_avg = busiest_time // busiest_count
    other_count = len(entries) - busiest_count
    if other_count:
        report.other_days_avg = (report.total_time - busiest_time) // other_count

    ranked = sorted(tag_totals.items(), key=lambda item: item[1], reverse=True)
    for tag, duration in ranked[:TOP_ACTIVITY_COUNT]:
        percent = int(duration / report.total_time * 100) if report.total_time else 0
        report.top_activities.append(InsightActivity(tag, duration, percent))
    return report


def show_insights() -> None:
    """Print insights about the logged sessions."""
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

    if len(entries) < MIN_SESSIONS:
        print(
            f"You have logged {len(entries)} sessions. At least {MIN_SESSIONS} are needed "
            "for meaningful insights. Keep up the great work!"
        )
        return

    report = calculate_insights(entries)
    print(f"📊 Your Focus Insights (based on {report.total_sessions} sessions)")
    print(_RULE)
    print(f"Total Time Focused:     {format_duration(report.total_time)}")
    print(f"Average Session Length: {format_duration(report.avg_session_length)}\n")
    print(f"Busiest Day:            {report.busiest_day}")
    print(
        f"  - You focus an average of {format_duration(report.busiest_day_avg)} "
        f"on {report.busiest_day}s."
    )
    print(f"  - Your average on other days is {format_duration(report.other_days_avg)}.\n")

    if report.top_activities:
        print("Top Activities (by time):")
        for activity in report.top_activities:
            print(
                f"  - {activity.tag:<20} {format_duration(activity.duration):<10} "
                f"({activity.percent}%)"
            )
    print(_RULE)