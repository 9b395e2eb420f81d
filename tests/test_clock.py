import pytest

from tableflow.clock import (
    align,
    format_clock_12,
    format_clock_24,
    format_duration,
    minutes_until,
    normalize_window,
    parse_clock,
    require_clock,
    round_down,
    round_up,
)
from tableflow.models import TimeWindow


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("00:00", 0),
        ("07:05", 425),
        ("19:30", 1170),
        ("23:59", 1439),
        ("9:15", 555),
        ("24:00", 1440),
        ("7:23 PM", 1163),
        ("12:00 AM", 0),
        ("12:30 PM", 750),
        ("11:45 am", 705),
        (" 8:00PM ", 1200),
        (1170, 1170),
        (1440, 1440),
    ],
)
def test_parse_clock_accepts_24h_12h_and_end_of_day(raw, expected):
    assert parse_clock(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["24:30", "25:00", "12:60", "13:00 PM", "0:15 AM", "7:30 XM", "", "dinner"]
    + [None, -5, 1441, True],
)
def test_parse_clock_rejects_malformed_input(raw):
    assert parse_clock(raw) is None


def test_require_clock_raises_for_malformed_input():
    assert require_clock("19:30") == 1170
    with pytest.raises(ValueError, match="Not a clock time"):
        require_clock("half past seven")


def test_formatting_wraps_into_one_day():
    assert format_clock_24(1170) == "19:30"
    assert format_clock_24(1440) == "00:00"
    assert format_clock_24(-15) == "23:45"
    assert format_clock_12(1163) == "7:23 PM"
    assert format_clock_12(0) == "12:00 AM"
    assert format_clock_12(720) == "12:00 PM"
    assert format_clock_12(1440 + 90) == "1:30 AM"


def test_format_is_inverse_of_parse():
    for minute in (0, 59, 61, 719, 720, 1163, 1439):
        assert parse_clock(format_clock_24(minute)) == minute
        assert parse_clock(format_clock_12(minute)) == minute


def test_format_duration():
    assert format_duration(45) == "45min"
    assert format_duration(120) == "2h"
    assert format_duration(90) == "1h 30min"


def test_overnight_window_reads_as_tonight_late_in_the_evening():
    assert normalize_window("22:00", "01:00", "23:00") == TimeWindow(1320, 1500)


def test_overnight_window_reads_as_last_night_just_after_midnight():
    assert normalize_window("22:00", "01:00", "00:30") == TimeWindow(-120, 60)


def test_window_that_already_ended_moves_to_the_next_day():
    assert normalize_window("18:00", "19:25", "19:30") == TimeWindow(2520, 2605)
    assert normalize_window("18:00", "19:25", "19:25") == TimeWindow(2520, 2605)


def test_degenerate_or_unparseable_windows_are_rejected():
    assert normalize_window("18:00", "18:00", "19:00") is None
    assert normalize_window("18:00", "late", "19:00") is None
    assert normalize_window("18:00", "19:00", "soon") is None


@pytest.mark.parametrize(
    ("start", "end"),
    [("24:00", "00:00"), ("24:00", "24:00"), (3000, 100), (1440, 0)],
)
def test_window_still_empty_after_wrapping_is_rejected(start, end):
    assert normalize_window(start, end, "05:00") is None


@pytest.mark.parametrize("anchor", [0, 30, 300, 1079, 1080, 1170, 1380, 1439])
@pytest.mark.parametrize(
    ("start", "end"),
    [
        ("18:00", "19:25"),
        ("22:30", "00:30"),
        ("00:00", "24:00"),
        ("23:59", "00:00"),
        ("05:00", "04:59"),
    ],
)
def test_normalized_window_ends_after_anchor_and_after_start(start, end, anchor):
    window = normalize_window(start, end, anchor)
    assert window is not None
    assert window.end > anchor
    assert window.end > window.start
    # and it is the earliest such occurrence
    assert window.end - 1440 <= anchor


def test_align_matches_normalize_for_stored_windows():
    stored = normalize_window("22:30", "00:30", "05:00")
    assert stored == TimeWindow(1350, 1470)
    assert align(stored, 1410) == TimeWindow(1350, 1470)
    assert align(stored, 1470) == TimeWindow(2790, 2910)


def test_circular_helpers():
    assert minutes_until(30, 1410) == 60
    assert minutes_until(1185, 1170) == 15
    assert round_up(1163, 15) == 1170
    assert round_up(1170, 15) == 1170
    assert round_down(1163, 15) == 1155
