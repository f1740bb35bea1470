"""Exporting the session log as CSV or JSON."""

from __future__ import annotations

import csv
import json
import re
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, TextIO

from .logs import DEFAULT_MAX_ENTRIES, LogReader
from .session import LogEntry
from .ui import format_duration

_MONTH_RE = re.compile(r"(\d{4})-(\d{2})")

CSV_HEADER = (
    "tag",
    "start_time",
    "end_time",
    "duration_seconds",
    "total_paused_seconds",
    "duration_formatted",
    "total_paused_formatted",
)

_JSON_ESCAPES = str.maketrans(
    {
        "<": "\\u003c",
        ">": "\\u003e",
        "&": "\\u0026",
        "\u2028": "\\u2028",
        "\u2029": "\\u2029",
    }
)


@dataclass
class ExportOptions:
    """What to export and where to."""

    filter_today: bool = False
    filter_week: bool = False
    filter_month: bool = False
    show_all: bool = False
    target_month: datetime | None = None
    format: str = "csv"
    output: str = ""


def _parse_month(text: str) -> datetime | None:
    match = _MONTH_RE.fullmatch(text)
    if match is None or not 1 <= int(match[2]) <= 12:
        return None
    return datetime(int(match[1]), int(match[2]), 1, tzinfo=timezone.utc)


def parse_export_args(args: Iterable[str]) -> ExportOptions:
    """Read export flags; unknown words that look like YYYY-MM select a month."""
    options = ExportOptions()
    remaining = iter(args)
    for arg in remaining:
        if arg == "--today":
            options.filter_today = True
        elif arg == "--week":
            options.filter_week = True
        elif arg == "--month":
            options.filter_month = True
        elif arg == "--all":
            options.show_all = True
        elif arg.startswith("--format="):
            options.format = arg[len("--format="):]
        elif arg == "--format":
            options.format = next(remaining, options.format)
        elif arg.startswith("--output="):
            options.output = arg[len("--output="):]
        elif arg == "--output":
            options.output = next(remaining, options.output)
        else:
            month = _parse_month(arg)
            if month is not None:
                options.target_month = month
    return options


def _fetch_entries(reader: LogReader, options: ExportOptions) -> list[LogEntry]:
    if options.show_all:
        return reader.read_all_entries()
    if options.target_month is not None:
        return reader.read_month_entries(options.target_month, 0)
    if options.filter_today or options.filter_week or options.filter_month:
        if options.filter_month and not (options.filter_today or options.filter_week):
            return reader.read_month_entries(datetime.now().astimezone(), 0)
        return reader.read_recent_entries(0, options.filter_today, options.filter_week)
    return reader.read_recent_entries(DEFAULT_MAX_ENTRIES, False, False)


def _write(stream: TextIO, fmt: str, entries: list[LogEntry]) -> None:
    if fmt == "csv":
        export_csv(stream, entries)
    elif fmt == "json":
        export_json(stream, entries)
    else:
        print(f"Unknown format: {fmt}. Supported formats are csv, json.", file=sys.stderr)


def handle_export(args: Iterable[str] | None = None) -> None:
    """Export log entries selected by ``args`` (defaults to the command line)."""
    options = parse_export_args(sys.argv[2:] if args is None else args)

    try:
        reader = LogReader.from_environment()
    except OSError as exc:
        print(f"Error creating log reader: {exc}", file=sys.stderr)
        return
    try:
        entries = _fetch_entries(reader, options)
    except OSError as exc:
        print(f"Error reading log entries: {exc}", file=sys.stderr)
        return

    if not entries:
        print("No log entries found for the selected period.", file=sys.stderr)
        return

    if not options.output:
        _write(sys.stdout, options.format, entries)
        return

    try:
        handle = open(options.output, "w", encoding="utf-8", newline="")
    except OSError as exc:
        print(f"Error creating output file: {exc}", file=sys.stderr)
        return
    with handle:
        print(f"Exporting {len(entries)} entries to {options.output}...", file=sys.stderr)
        _write(handle, options.format, entries)


def _rfc3339(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.astimezone()
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    offset = moment.utcoffset() or timedelta(0)
    if not offset:
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(offset) // timedelta(minutes=1)
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def export_csv(stream: TextIO, entries: Iterable[LogEntry]) -> None:
    """Write entries as CSV with a header row."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for entry in entries:
        writer.writerow(
            (
                entry.tag,
                _rfc3339(entry.start_time),
                _rfc3339(entry.end_time),
                int(entry.duration.total_seconds()),
                int(entry.total_paused.total_seconds()),
                format_duration(entry.duration),
                format_duration(entry.total_paused),
            )
        )


def export_json(stream: TextIO, entries: Iterable[LogEntry]) -> None:
    """Write entries as an indented JSON array."""
    items = [entry.to_dict() for entry in entries]
    if not items:
        stream.write("[]\n")
        return
    text = json.dumps(items, indent=2, ensure_ascii=False)
    stream.write(text.translate(_JSON_ESCAPES) + "\n")