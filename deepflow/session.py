"""Active session state and the monthly session log files."""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_TIME_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})"
)


def _parse_time(text: Any) -> datetime:
    if not isinstance(text, str):
        raise ValueError(f"invalid timestamp {text!r}")
    match = _TIME_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid timestamp {text!r}")
    year, month, day, hour, minute, second = (int(part) for part in match.groups()[:6])
    micros = int((match[7] or "")[:6].ljust(6, "0"))
    zone = match[8]
    if zone in ("Z", "z"):
        tz = timezone.utc
    else:
        offset = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
        tz = timezone(-offset if zone[0] == "-" else offset)
    return datetime(year, month, day, hour, minute, second, micros, tzinfo=tz)


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.astimezone()
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if moment.microsecond:
        text += f".{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset() or timedelta(0)
    if not offset:
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(offset) // timedelta(minutes=1)
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _to_nanos(d: timedelta) -> int:
    return (d // timedelta(microseconds=1)) * 1000


def _from_nanos(value: Any) -> timedelta:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"invalid duration value {value!r}")
    return timedelta(microseconds=value // 1000)


@dataclass
class Session:
    """A work session that is in progress or paused."""

    tag: str = ""
    start_time: datetime = ZERO_TIME
    target_duration: timedelta = timedelta(0)
    paused_at: datetime | None = None
    is_paused: bool = False
    total_paused: timedelta = timedelta(0)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"tag": self.tag, "start_time": _format_time(self.start_time)}
        if self.target_duration:
            data["target_duration"] = _to_nanos(self.target_duration)
        data["paused_at"] = _format_time(self.paused_at or ZERO_TIME)
        data["is_paused"] = self.is_paused
        data["total_paused"] = _to_nanos(self.total_paused)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        paused_at = None
        if "paused_at" in data:
            parsed = _parse_time(data["paused_at"])
            paused_at = None if parsed == ZERO_TIME else parsed
        return cls(
            tag=str(data.get("tag", "")),
            start_time=_parse_time(data["start_time"]) if "start_time" in data else ZERO_TIME,
            target_duration=_from_nanos(data.get("target_duration", 0)),
            paused_at=paused_at,
            is_paused=bool(data.get("is_paused", False)),
            total_paused=_from_nanos(data.get("total_paused", 0)),
        )


@dataclass
class LogEntry:
    """A completed session as recorded in the log."""

    tag: str = ""
    start_time: datetime = ZERO_TIME
    end_time: datetime = ZERO_TIME
    duration: timedelta = timedelta(0)
    total_paused: timedelta = timedelta(0)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "tag": self.tag,
            "start_time": _format_time(self.start_time),
            "end_time": _format_time(self.end_time),
            "duration": _to_nanos(self.duration),
        }
        if self.total_paused:
            data["total_paused"] = _to_nanos(self.total_paused)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LogEntry:
        return cls(
            tag=str(data.get("tag", "")),
            start_time=_parse_time(data["start_time"]) if "start_time" in data else ZERO_TIME,
            end_time=_parse_time(data["end_time"]) if "end_time" in data else ZERO_TIME,
            duration=_from_nanos(data.get("duration", 0)),
            total_paused=_from_nanos(data.get("total_paused", 0)),
        )


def _home() -> Path:
    try:
        return Path.home()
    except RuntimeError as exc:
        raise OSError(f"could not get user home directory: {exc}") from exc


def get_session_path() -> Path:
    """Locate the file that holds the active session."""
    explicit = os.environ.get("FLOW_SESSION_PATH")
    if explicit:
        return Path(explicit)
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "flow" / "session"

    home = _home()
    legacy = home / ".flow-session"
    if legacy.exists():
        return legacy
    return home / ".local" / "share" / "flow" / "session"


def get_log_dir() -> Path:
    """Directory holding the monthly log files."""
    explicit = os.environ.get("FLOW_LOG_PATH")
    if explicit:
        return Path(explicit).parent / "logs"
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "flow" / "logs"
    return _home() / ".local" / "share" / "flow" / "logs"


def get_log_path(date: datetime) -> Path:
    """Path of the log file for the month containing ``date``."""
    return get_log_dir() / f"{date.year:04d}{date.month:02d}_sessions.jsonl"


def session_exists() -> bool:
    try:
        return get_session_path().exists()
    except OSError:
        return False


def load_session() -> Session:
    """Read the active session; raises OSError or ValueError on failure."""
    data = json.loads(get_session_path().read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("session file does not hold a JSON object")
    return Session.from_dict(data)


def save_session(session: Session) -> None:
    path = get_session_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(session.to_dict(), ensure_ascii=False, separators=(",", ":")),
        encoding="utf-8",
    )


def log_session(entry: LogEntry) -> None:
    """Append a completed session to its monthly log file."""
    path = get_log_path(entry.end_time)
    path.parent.mkdir(parents=True, exist_ok=True)
    line = json.dumps(entry.to_dict(), ensure_ascii=False, separators=(",", ":"))
    with path.open("a", encoding="utf-8") as handle:
        handle.write(line + "\n")