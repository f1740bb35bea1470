from datetime import timedelta

import pytest

from deepflow.durations import format_go_duration, parse_duration


def test_parse_simple_hours():
    assert parse_duration("4h") == timedelta(hours=4)


def test_parse_compound_is_sum_of_parts():
    assert parse_duration("3h30m") == parse_duration("3h") + parse_duration("30m")


def test_parse_fractional_hours_equals_minutes():
    assert parse_duration("1.5h") == parse_duration("90m")


def test_parse_negative_is_negation():
    assert parse_duration("-1m") == -parse_duration("1m")
    assert parse_duration("+1m") == parse_duration("1m")


def test_parse_small_units():
    assert parse_duration("300ms") == timedelta(milliseconds=300)
    assert parse_duration("1µs") == parse_duration("1us")
    assert parse_duration("1us") == timedelta(microseconds=1)


def test_parse_bare_zero():
    assert parse_duration("0") == timedelta(0)


@pytest.mark.parametrize("text", ["", "5", "abc", "1x", ".", "h", "1h-5m", "-"])
def test_parse_invalid(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_parse_overflow():
    with pytest.raises(ValueError):
        parse_duration("9999999999h")


def test_format_pinned_values():
    assert format_go_duration(timedelta(minutes=5)) == "5m0s"
    assert format_go_duration(timedelta(hours=2)) == "2h0m0s"
    assert format_go_duration(timedelta(seconds=1.5)) == "1.5s"
    assert format_go_duration(timedelta(0)) == "0s"


@pytest.mark.parametrize(
    "duration",
    [
        timedelta(minutes=15),
        timedelta(hours=1, minutes=30),
        timedelta(milliseconds=250),
        timedelta(microseconds=7),
        timedelta(hours=26, seconds=3, microseconds=120),
        -timedelta(minutes=3),
    ],
)
def test_format_round_trips(duration):
    assert parse_duration(format_go_duration(duration)) == duration