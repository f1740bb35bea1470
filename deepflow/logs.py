"""Reading, filtering and summarising the monthly session logs."""

from __future__ import annotations

import json
import re
import sys
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, timezone
from pathlib import Path

from .session import LogEntry, get_log_dir
from .ui import DIM, RESET, format_duration

DEFAULT_MAX_ENTRIES = 10
MAX_ENTRIES_LIMIT = 1000
WARNING_THRESHOLD = 10000

_LOG_GLOB = "*_sessions.jsonl"
_FILE_MONTH_RE = re.compile(r"(\d{4})(\d{2})")
_MONTH_ARG_RE = re.compile(r"(\d{4})-(\d{2})")
_DAY_ARG_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")

_MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.astimezone()


def _now() -> datetime:
    return datetime.now().astimezone()


def _short_date(moment: datetime) -> str:
    return f"{_MONTH_NAMES[moment.month - 1][:3]} {moment.day}"


def _month_title(moment: datetime) -> str:
    return f"{_MONTH_NAMES[moment.month - 1]} {moment.year}"


def _previous_month(year: int, month: int) -> tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


def _file_month(path: Path) -> tuple[int, int] | None:
    match = _FILE_MONTH_RE.match(path.name[:6])
    if match is None or len(path.name) < 6:
        return None
    year, month = int(match[1]), int(match[2])
    if not 1 <= month <= 12:
        return None
    return year, month


class LogReader:
    """Reads log entries from the monthly ``YYYYMM_sessions.jsonl`` files."""

    def __init__(self, log_dir: str | Path) -> None:
        self.log_dir = Path(log_dir)

    @classmethod
    def from_environment(cls) -> LogReader:
        """A reader for the log directory chosen by the environment."""
        return cls(get_log_dir())

    def _relevant_files(
        self,
        filter_today: bool = False,
        filter_week: bool = False,
        filter_month: bool = False,
        target_month: datetime | None = None,
    ) -> list[Path]:
        if not self.log_dir.exists():
            return []
        files = sorted(self.log_dir.glob(_LOG_GLOB))
        if not files:
            return []
        if not (filter_today or filter_week or filter_month or target_month is not None):
            return files

        now = _now()
        current = (now.year, now.month)
        previous = _previous_month(*current)
        relevant = []
        for path in files:
            file_month = _file_month(path)
            if file_month is None:
                continue
            if target_month is not None:
                wanted = file_month == (target_month.year, target_month.month)
            elif filter_today or filter_month:
                wanted = file_month == current
            else:
                wanted = file_month in (current, previous)
            if wanted:
                relevant.append(path)
        return relevant

    @staticmethod
    def _read_file(path: Path) -> tuple[list[LogEntry], int]:
        entries = []
        line_count = 0
        with path.open(encoding="utf-8", errors="replace") as handle:
            for raw_line in handle:
                line_count += 1
                line = raw_line.strip()
                if not line:
                    continue
                try:
                    data = json.loads(line)
                    if not isinstance(data, dict):
                        continue
                    entries.append(LogEntry.from_dict(data))
                except (ValueError, TypeError, KeyError):
                    continue
        return entries, line_count

    def _read_entries(
        self,
        limit: int,
        filter_today: bool,
        filter_week: bool,
        read_all: bool,
        target_month: datetime | None,
    ) -> list[LogEntry]:
        if limit > MAX_ENTRIES_LIMIT and not read_all:
            limit = MAX_ENTRIES_LIMIT

        if target_month is not None:
            files = self._relevant_files(target_month=target_month)
        else:
            files = self._relevant_files(filter_today, filter_week)
        if not files:
            return []

        entries: list[LogEntry] = []
        total_lines = 0
        for path in sorted(files, key=str, reverse=True):
            try:
                file_entries, lines = self._read_file(path)
            except OSError as exc:
                print(f"Warning: error reading {path}: {exc}", file=sys.stderr)
                continue
            entries.extend(file_entries)
            total_lines += lines
            if not read_all and limit > 0 and len(entries) >= limit:
                break

        if total_lines > WARNING_THRESHOLD:
            print(
                f"⚠️  Large dataset detected ({total_lines} entries across {len(files)} files). "
                "Consider using more specific filters.",
                file=sys.stderr,
            )

        entries.sort(key=lambda entry: _aware(entry.end_time), reverse=True)
        if not read_all and limit > 0:
            entries = entries[:limit]
        return entries

    def read_recent_entries(self, limit: int, filter_today: bool, filter_week: bool) -> list[LogEntry]:
        """The most recent entries, newest first, optionally limited to today or this week."""
        entries = self._read_entries(limit, filter_today, filter_week, False, None)
        if not (filter_today or filter_week):
            return entries
        now = _now()
        filtered = [
            entry
            for entry in entries
            if not (filter_today and not is_today(entry.end_time, now))
            and not (filter_week and not is_this_week(entry.end_time, now))
        ]
        return filtered[:limit] if limit > 0 else filtered

    def read_month_entries(self, month: datetime, limit: int) -> list[LogEntry]:
        """Entries from the log file of the month containing ``month``."""
        return self._read_entries(limit, False, False, False, month)

    def read_all_entries(self) -> list[LogEntry]:
        """Every logged entry, newest first."""
        return self._read_entries(0, False, False, True, None)


@dataclass
class ActivityStat:
    """Time and session count for one tag."""

    tag: str
    duration: timedelta
    count: int


@dataclass
class LogStats:
    """Aggregated statistics over a set of entries."""

    total_time: timedelta = timedelta(0)
    total_sessions: int = 0
    average_time: timedelta = timedelta(0)
    top_activities: list[ActivityStat] = field(default_factory=list)
    date_range: str = ""


def calculate_stats(entries: list[LogEntry]) -> LogStats:
    """Totals, averages, date range and the ten largest activities."""
    if not entries:
        return LogStats()

    total = timedelta(0)
    tag_times: dict[str, timedelta] = {}
    tag_counts: dict[str, int] = {}
    for entry in entries:
        total += entry.duration
        tag_times[entry.tag] = tag_times.get(entry.tag, timedelta(0)) + entry.duration
        tag_counts[entry.tag] = tag_counts.get(entry.tag, 0) + 1

    earliest = min((entry.end_time for entry in entries), key=_aware)
    latest = max((entry.end_time for entry in entries), key=_aware)
    if earliest.date() == latest.date():
        date_range = f"{_short_date(earliest)}, {earliest.year}"
    else:
        date_range = f"{_short_date(earliest)} - {_short_date(latest)}, {latest.year}"

    activities = sorted(
        (ActivityStat(tag, duration, tag_counts[tag]) for tag, duration in tag_times.items()),
        key=lambda stat: stat.duration,
        reverse=True,
    )
    return LogStats(
        total_time=total,
        total_sessions=len(entries),
        average_time=total / len(entries),
        top_activities=activities[:10],
        date_range=date_range,
    )


def _parse_month_arg(text: str) -> datetime | None:
    month_match = _MONTH_ARG_RE.fullmatch(text)
    day_match = _DAY_ARG_RE.fullmatch(text)
    try:
        if month_match:
            return datetime(int(month_match[1]), int(month_match[2]), 1, tzinfo=timezone.utc)
        if day_match:
            return datetime(
                int(day_match[1]), int(day_match[2]), int(day_match[3]), tzinfo=timezone.utc
            )
    except ValueError:
        return None
    return None


def handle_log(
    show_stats: bool,
    filter_today: bool,
    filter_week: bool,
    filter_month: bool,
    show_all: bool,
    month_str: str,
) -> None:
    """Print the session log or its statistics; exits with status 1 on errors."""
    try:
        reader = LogReader.from_environment()
    except OSError as exc:
        print(f"Error creating log reader: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    target_month = None
    if month_str:
        target_month = _parse_month_arg(month_str)
        if target_month is None:
            print(
                f"Error: Invalid month format '{month_str}'. Please use YYYY-MM.",
                file=sys.stderr,
            )
            raise SystemExit(1)

    try:
        if target_month is not None:
            entries = reader.read_month_entries(target_month, DEFAULT_MAX_ENTRIES)
        elif show_all:
            entries = reader.read_all_entries()
            if filter_today or filter_week or filter_month:
                now = _now()
                entries = [
                    entry
                    for entry in entries
                    if not (filter_today and not is_today(entry.end_time, now))
                    and not (filter_week and not is_this_week(entry.end_time, now))
                    and not (
                        filter_month
                        and (entry.end_time.year, entry.end_time.month) != (now.year, now.month)
                    )
                ]
        else:
            entries = reader.read_recent_entries(DEFAULT_MAX_ENTRIES, filter_today, filter_week)
    except OSError as exc:
        print(f"Error loading log entries: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not entries:
        print("No sessions logged for the selected period. Use 'flow start' to begin.")
        return

    if show_stats:
        _display_stats(entries, filter_today, filter_week, filter_month, target_month)
    else:
        _display_entries(entries, filter_today, filter_week, filter_month, target_month, show_all)


def _display_entries(
    entries: list[LogEntry],
    filter_today: bool,
    filter_week: bool,
    filter_month: bool,
    target_month: datetime | None,
    show_all: bool,
) -> None:
    if target_month is not None:
        period = f"{_month_title(target_month)} sessions"
    elif filter_today:
        period = "Today's sessions"
    elif filter_week:
        period = "This week's sessions"
    elif filter_month:
        period = "This month's sessions"
    elif show_all:
        period = "All sessions"
    else:
        period = "Recent sessions"

    print(f"🌊 {period}:\n")
    for entry in entries:
        time_range = f"{entry.start_time:%H:%M}-{entry.end_time:%H:%M}"
        print(
            f"{_short_date(entry.end_time)} {time_range} "
            f"{format_duration(entry.duration)} {entry.tag}"
        )

    total = sum((entry.duration for entry in entries), timedelta(0))
    print(f"\n{DIM}Total: {format_duration(total)} across {len(entries)} sessions{RESET}")


def _display_stats(
    entries: list[LogEntry],
    filter_today: bool,
    filter_week: bool,
    filter_month: bool,
    target_month: datetime | None,
) -> None:
    stats = calculate_stats(entries)

    if target_month is not None:
        period = _month_title(target_month)
    elif filter_today:
        period = "Today"
    elif filter_week:
        period = "This Week"
    elif filter_month:
        period = "This Month"
    else:
        period = "All Time"

    print(f"🌊 Deep Work Statistics ({period}):\n")
    print(f"Total time:     {format_duration(stats.total_time)}")
    print(f"Sessions:       {stats.total_sessions}")
    print(f"Average:        {format_duration(stats.average_time)} per session")
    if stats.date_range:
        print(f"Date range:     {stats.date_range}")

    if len(stats.top_activities) > 1:
        print("\nTop activities:")
        for rank, activity in enumerate(stats.top_activities[:5], start=1):
            if stats.total_time:
                percentage = f"{activity.duration / stats.total_time * 100:.1f}"
            else:
                percentage = "NaN"
            print(
                f"  {rank}. {activity.tag} ({activity.count} sessions, "
                f"{format_duration(activity.duration)}, {percentage}%)"
            )


def is_today(t: datetime, now: datetime) -> bool:
    """Whether ``t`` falls on the same calendar day as ``now``."""
    return (t.year, t.month, t.day) == (now.year, now.month, now.day)


def is_this_week(t: datetime, now: datetime) -> bool:
    """Whether ``t`` falls in the Sunday-to-Saturday week containing ``now``."""
    now = _aware(now)
    days_since_sunday = (now.weekday() + 1) % 7
    start_day = (now - timedelta(days=days_since_sunday)).date()
    week_start = datetime.combine(start_day, time(0), tzinfo=now.tzinfo)
    week_end = datetime.combine(
        start_day + timedelta(days=6), time(23, 59, 59, 999999), tzinfo=now.tzinfo
    )
    return week_start <= _aware(t) <= week_end