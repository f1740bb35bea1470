import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from deepflow.logs import (
    DEFAULT_MAX_ENTRIES,
    MAX_ENTRIES_LIMIT,
    LogReader,
    calculate_stats,
    handle_log,
    is_this_week,
    is_today,
)
from deepflow.session import LogEntry, log_session

UTC = timezone.utc


@pytest.fixture
def data_home(tmp_path, monkeypatch):
    monkeypatch.delenv("FLOW_LOG_PATH", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    return tmp_path


def log_dir_of(data_home: Path) -> Path:
    return data_home / "flow" / "logs"


def create_month_file(log_dir: Path, filename: str, entries) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)
    with (log_dir / filename).open("w", encoding="utf-8") as handle:
        for entry in entries:
            handle.write(json.dumps(entry.to_dict()) + "\n")


def local_now():
    return datetime.now().astimezone()


def test_recent_entries_capped_at_limit(data_home):
    now = local_now()
    entries = [
        LogEntry(tag=f"e{i}", end_time=now - timedelta(seconds=i), duration=timedelta(minutes=1))
        for i in range(MAX_ENTRIES_LIMIT + 100)
    ]
    create_month_file(log_dir_of(data_home), f"{now:%Y%m}_sessions.jsonl", entries)
    reader = LogReader.from_environment()
    result = reader.read_recent_entries(2000, False, False)
    assert len(result) == MAX_ENTRIES_LIMIT


def test_recent_entries_newest_first_with_limit(data_home):
    now = local_now()
    entries = [
        LogEntry(tag=f"e{i}", end_time=now - timedelta(minutes=i), duration=timedelta(minutes=1))
        for i in range(15)
    ]
    create_month_file(log_dir_of(data_home), f"{now:%Y%m}_sessions.jsonl", reversed(entries))
    result = LogReader.from_environment().read_recent_entries(DEFAULT_MAX_ENTRIES, False, False)
    assert [entry.tag for entry in result] == [f"e{i}" for i in range(10)]


def test_log_session_with_partitioning(data_home):
    jan = LogEntry(
        tag="January Work",
        start_time=datetime(2024, 1, 15, 10, tzinfo=UTC),
        end_time=datetime(2024, 1, 15, 11, tzinfo=UTC),
        duration=timedelta(hours=1),
    )
    feb = LogEntry(
        tag="February Work",
        start_time=datetime(2024, 2, 15, 10, tzinfo=UTC),
        end_time=datetime(2024, 2, 15, 11, tzinfo=UTC),
        duration=timedelta(hours=1),
    )
    log_session(jan)
    log_session(feb)
    log_dir = log_dir_of(data_home)
    assert (log_dir / "202401_sessions.jsonl").is_file()
    assert (log_dir / "202402_sessions.jsonl").is_file()
    reader = LogReader(log_dir)
    january = reader.read_month_entries(datetime(2024, 1, 1, tzinfo=UTC), 0)
    february = reader.read_month_entries(datetime(2024, 2, 1, tzinfo=UTC), 0)
    assert january == [jan]
    assert february == [feb]


def test_month_filtering(data_home):
    log_dir = log_dir_of(data_home)
    create_month_file(log_dir, "202401_sessions.jsonl", [
        LogEntry(tag="Jan1", end_time=datetime(2024, 1, 1, 10, tzinfo=UTC), duration=timedelta(hours=1)),
        LogEntry(tag="Jan2", end_time=datetime(2024, 1, 15, 10, tzinfo=UTC), duration=timedelta(hours=1)),
    ])
    create_month_file(log_dir, "202402_sessions.jsonl", [
        LogEntry(tag="Feb1", end_time=datetime(2024, 2, 1, 10, tzinfo=UTC), duration=timedelta(hours=1)),
        LogEntry(tag="Feb2", end_time=datetime(2024, 2, 15, 10, tzinfo=UTC), duration=timedelta(hours=1)),
    ])
    reader = LogReader(log_dir)
    january = reader.read_month_entries(datetime(2024, 1, 1, tzinfo=UTC), 100)
    assert sorted(entry.tag for entry in january) == ["Jan1", "Jan2"]
    assert len(reader.read_all_entries()) == 4


def test_all_entries_sorted_newest_first(data_home):
    log_dir = log_dir_of(data_home)
    create_month_file(log_dir, "202401_sessions.jsonl", [
        LogEntry(tag="Jan1", end_time=datetime(2024, 1, 1, 10, tzinfo=UTC)),
    ])
    create_month_file(log_dir, "202402_sessions.jsonl", [
        LogEntry(tag="Feb1", end_time=datetime(2024, 2, 1, 10, tzinfo=UTC)),
    ])
    tags = [entry.tag for entry in LogReader(log_dir).read_all_entries()]
    assert tags == ["Feb1", "Jan1"]


def test_malformed_lines_are_skipped(data_home):
    log_dir = log_dir_of(data_home)
    log_dir.mkdir(parents=True)
    valid = json.dumps(LogEntry(tag="valid", duration=timedelta(hours=1)).to_dict())
    (log_dir / "202301_sessions.jsonl").write_text(
        valid + "\nthis is not json\n\n[1, 2]\n", encoding="utf-8"
    )
    entries = LogReader.from_environment().read_all_entries()
    assert len(entries) == 1
    assert entries[0].tag == "valid"
    assert entries[0].duration == timedelta(hours=1)


def test_missing_log_directory_gives_no_entries(data_home):
    assert LogReader.from_environment().read_all_entries() == []


def test_files_with_bad_names_ignored_by_month_filter(data_home):
    log_dir = log_dir_of(data_home)
    create_month_file(log_dir, "bogus_sessions.jsonl", [
        LogEntry(tag="bogus", end_time=datetime(2024, 1, 1, tzinfo=UTC)),
    ])
    create_month_file(log_dir, "202401_sessions.jsonl", [
        LogEntry(tag="real", end_time=datetime(2024, 1, 2, tzinfo=UTC)),
    ])
    reader = LogReader(log_dir)
    month = reader.read_month_entries(datetime(2024, 1, 1, tzinfo=UTC), 0)
    assert [entry.tag for entry in month] == ["real"]
    assert len(reader.read_all_entries()) == 2


def test_reader_today_and_week_filters(data_home):
    today = local_now().replace(hour=10, minute=0, second=0, microsecond=0)
    yesterday = today - timedelta(days=1)
    last_week = today - timedelta(days=8)
    half = timedelta(minutes=30)
    for tag, start in [
        ("today1", today),
        ("today2", today + timedelta(hours=2)),
        ("yesterday", yesterday),
        ("lastweek", last_week),
    ]:
        log_session(LogEntry(tag=tag, start_time=start, end_time=start + half, duration=half))

    reader = LogReader.from_environment()
    today_tags = sorted(entry.tag for entry in reader.read_recent_entries(100, True, False))
    assert today_tags == ["today1", "today2"]
    week_tags = {entry.tag for entry in reader.read_recent_entries(100, False, True)}
    assert {"today1", "today2"} <= week_tags
    assert "lastweek" not in week_tags
    assert len(reader.read_all_entries()) == 4


def test_calculate_stats():
    now = datetime(2024, 3, 10, 12, tzinfo=UTC)
    half = timedelta(minutes=30)
    entries = [
        LogEntry(tag="coding", start_time=now - timedelta(hours=2), end_time=now - timedelta(minutes=90), duration=half),
        LogEntry(tag="coding", start_time=now - timedelta(hours=1), end_time=now - half, duration=half),
        LogEntry(tag="writing", start_time=now - half, end_time=now, duration=half),
    ]
    stats = calculate_stats(entries)
    assert stats.total_sessions == 3
    assert stats.total_time == timedelta(minutes=90)
    assert stats.average_time == timedelta(minutes=30)
    assert len(stats.top_activities) == 2
    assert stats.top_activities[0].tag == "coding"
    assert stats.top_activities[0].duration == timedelta(minutes=60)
    assert stats.top_activities[0].count == 2
    assert stats.date_range == "Mar 10, 2024"


def test_calculate_stats_date_range_across_days():
    entries = [
        LogEntry(tag="a", end_time=datetime(2024, 1, 1, 10, tzinfo=UTC), duration=timedelta(hours=1)),
        LogEntry(tag="b", end_time=datetime(2024, 2, 15, 10, tzinfo=UTC), duration=timedelta(hours=1)),
    ]
    assert calculate_stats(entries).date_range == "Jan 1 - Feb 15, 2024"


def test_calculate_stats_keeps_top_ten():
    entries = [
        LogEntry(tag=f"t{i}", end_time=datetime(2024, 1, 1, tzinfo=UTC), duration=timedelta(minutes=i + 1))
        for i in range(12)
    ]
    stats = calculate_stats(entries)
    assert [stat.tag for stat in stats.top_activities] == [f"t{i}" for i in range(11, 1, -1)]


def test_empty_stats():
    stats = calculate_stats([])
    assert stats.total_sessions == 0
    assert stats.total_time == timedelta(0)
    assert stats.top_activities == []
    assert stats.date_range == ""


def test_is_today():
    now = datetime(2024, 1, 17, 12, tzinfo=UTC)
    assert is_today(datetime(2024, 1, 17, 10, tzinfo=UTC), now)
    assert not is_today(datetime(2024, 1, 16, 10, tzinfo=UTC), now)


def test_is_this_week():
    now = datetime(2024, 1, 17, 12, tzinfo=UTC)  # a Wednesday
    today = datetime(2024, 1, 17, 10, tzinfo=UTC)
    assert is_this_week(today, now)
    assert is_this_week(today - timedelta(days=1), now)
    assert not is_this_week(today - timedelta(days=8), now)


def test_is_this_week_boundaries():
    now = datetime(2024, 1, 17, 12, tzinfo=UTC)
    assert is_this_week(datetime(2024, 1, 14, 0, 0, tzinfo=UTC), now)
    assert is_this_week(datetime(2024, 1, 20, 23, 59, 59, 999999, tzinfo=UTC), now)
    assert not is_this_week(datetime(2024, 1, 13, 23, 59, 59, tzinfo=UTC), now)
    assert not is_this_week(datetime(2024, 1, 21, 0, 0, tzinfo=UTC), now)


def test_handle_log_all_sessions(data_home, capsys):
    create_month_file(log_dir_of(data_home), "202401_sessions.jsonl", [
        LogEntry(
            tag="Writing",
            start_time=datetime(2024, 1, 5, 9, 0, tzinfo=UTC),
            end_time=datetime(2024, 1, 5, 10, 30, tzinfo=UTC),
            duration=timedelta(minutes=90),
        ),
    ])
    handle_log(False, False, False, False, True, "")
    out = capsys.readouterr().out
    assert "🌊 All sessions:" in out
    assert "Jan 5 09:00-10:30 1h 30m Writing" in out
    assert "Total: 1h 30m across 1 sessions" in out


def test_handle_log_month_stats(data_home, capsys):
    create_month_file(log_dir_of(data_home), "202401_sessions.jsonl", [
        LogEntry(tag="Jan1", end_time=datetime(2024, 1, 1, 10, tzinfo=UTC), duration=timedelta(hours=1)),
        LogEntry(tag="Jan2", end_time=datetime(2024, 1, 15, 10, tzinfo=UTC), duration=timedelta(hours=1)),
    ])
    handle_log(True, False, False, False, False, "2024-01")
    out = capsys.readouterr().out
    assert "Deep Work Statistics (January 2024)" in out
    assert "Sessions:       2" in out
    assert "Date range:     Jan 1 - Jan 15, 2024" in out
    assert "50.0%" in out


def test_handle_log_month_listing(data_home, capsys):
    create_month_file(log_dir_of(data_home), "202402_sessions.jsonl", [
        LogEntry(tag="Feb1", end_time=datetime(2024, 2, 1, 10, tzinfo=UTC), duration=timedelta(hours=1)),
    ])
    handle_log(False, False, False, False, False, "2024-02-10")
    assert "February 2024 sessions" in capsys.readouterr().out


def test_handle_log_invalid_month(data_home, capsys):
    with pytest.raises(SystemExit) as excinfo:
        handle_log(False, False, False, False, False, "not-a-month")
    assert excinfo.value.code == 1
    assert "Invalid month format 'not-a-month'" in capsys.readouterr().err


def test_handle_log_no_entries(data_home, capsys):
    handle_log(False, False, False, False, False, "")
    assert "No sessions logged for the selected period" in capsys.readouterr().out