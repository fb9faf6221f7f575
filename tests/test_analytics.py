import os
import time
from datetime import date, datetime

import pytest

from glucotrack.analytics import (
    classify_status,
    compute_stats,
    compute_window,
    filter_readings,
    readings_to_dataframe,
    status_breakdown,
)
from glucotrack.models import DateRange, FilterRange, GlucoseStatus, ReadingType
from glucotrack.store import create_reading

NOW = datetime(2024, 6, 15, 12, 0)


def _reading(date_str, time_str="08:00", value=100, reading_type=ReadingType.FASTING):
    return create_reading(date_str, time_str, value, reading_type)


@pytest.mark.parametrize("reading_type", list(ReadingType))
def test_classify_status_low_for_every_type(reading_type):
    assert classify_status(69, reading_type) is GlucoseStatus.LOW
    assert classify_status(1, reading_type) is GlucoseStatus.LOW
    assert classify_status(70, reading_type) is GlucoseStatus.NORMAL


@pytest.mark.parametrize("reading_type", [ReadingType.FASTING, ReadingType.PRE_MEAL])
def test_classify_status_fasting_thresholds(reading_type):
    assert classify_status(100, reading_type) is GlucoseStatus.NORMAL
    assert classify_status(101, reading_type) is GlucoseStatus.ELEVATED
    assert classify_status(125, reading_type) is GlucoseStatus.ELEVATED
    assert classify_status(126, reading_type) is GlucoseStatus.HIGH


@pytest.mark.parametrize("reading_type", [ReadingType.AFTER_MEAL, ReadingType.BEDTIME])
def test_classify_status_after_meal_thresholds(reading_type):
    assert classify_status(140, reading_type) is GlucoseStatus.NORMAL
    assert classify_status(141, reading_type) is GlucoseStatus.ELEVATED
    assert classify_status(180, reading_type) is GlucoseStatus.ELEVATED
    assert classify_status(181, reading_type) is GlucoseStatus.HIGH


def test_compute_stats_empty_means_no_data():
    stats = compute_stats([])
    assert (stats.avg, stats.min, stats.max, stats.count) == (0, 0, 0, 0)


def test_compute_stats_basic_metrics():
    readings = [_reading("2024-06-14", value=v) for v in (80, 100, 120)]
    stats = compute_stats(readings)
    assert stats.avg == 100
    assert stats.min == 80
    assert stats.max == 120
    assert stats.count == 3


def test_compute_stats_rounds_half_up():
    assert compute_stats([_reading("2024-06-14", value=v) for v in (100, 101)]).avg == 101
    assert compute_stats([_reading("2024-06-14", value=v) for v in (100, 100, 101)]).avg == 100


def test_three_day_window_excludes_four_days_ago():
    old = _reading("2024-06-11", "12:00")
    recent = _reading("2024-06-13", "12:00")

    result = filter_readings([old, recent], FilterRange.THREE_DAYS, now=NOW)

    assert result == [recent]


def test_relative_window_covers_rest_of_today():
    later_today = _reading("2024-06-15", "23:30")
    tomorrow = _reading("2024-06-16", "00:05")

    result = filter_readings([later_today, tomorrow], FilterRange.ONE_WEEK, now=NOW)

    assert result == [later_today]


def test_filter_sorts_newest_first():
    a = _reading("2024-06-01", "09:00")
    b = _reading("2024-06-14", "07:00")
    c = _reading("2024-06-10", "18:30")

    result = filter_readings([a, b, c], FilterRange.ONE_MONTH, now=NOW)

    assert result == [b, c, a]


def test_custom_range_is_inclusive_on_both_days():
    first = _reading("2024-01-01", "00:00")
    last = _reading("2024-01-03", "23:59")
    after = _reading("2024-01-04", "00:01")
    before = _reading("2023-12-31", "23:59")
    custom = DateRange(start=date(2024, 1, 1), end=date(2024, 1, 3))

    result = filter_readings([first, last, after, before], FilterRange.CUSTOM, custom)

    assert result == [last, first]


def test_custom_filter_requires_range():
    with pytest.raises(ValueError):
        compute_window(FilterRange.CUSTOM)


@pytest.fixture
def eastern_time():
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is unavailable on this platform")
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "EST5EDT,M3.2.0,M11.1.0"
    time.tzset()
    yield
    if previous is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = previous
    time.tzset()


def test_relative_window_across_dst_shifts_by_an_hour(eastern_time):
    # Clocks sprang forward on 2024-03-10, so 72 hours back from the end of
    # 2024-03-12 lands at 22:59:59.999 on 2024-03-09 rather than midnight.
    now = datetime(2024, 3, 12, 10, 0)
    start_ms, _ = compute_window(FilterRange.THREE_DAYS, now=now)

    inside = _reading("2024-03-09", "23:30")
    outside = _reading("2024-03-09", "22:30")

    assert datetime.fromtimestamp(start_ms / 1000) == datetime(2024, 3, 9, 22, 59, 59, 999000)
    assert filter_readings([inside, outside], FilterRange.THREE_DAYS, now=now) == [inside]


def test_status_breakdown_counts_every_status():
    readings = [
        _reading("2024-06-14", value=60),
        _reading("2024-06-14", value=90),
        _reading("2024-06-14", value=150, reading_type=ReadingType.AFTER_MEAL),
        _reading("2024-06-14", value=200, reading_type=ReadingType.BEDTIME),
        _reading("2024-06-14", value=95),
    ]

    counts = status_breakdown(readings)

    assert counts == {
        GlucoseStatus.LOW: 1,
        GlucoseStatus.NORMAL: 2,
        GlucoseStatus.ELEVATED: 1,
        GlucoseStatus.HIGH: 1,
    }


def test_readings_to_dataframe_adds_status_column():
    df = readings_to_dataframe([_reading("2024-06-14", "07:15", 130, ReadingType.PRE_MEAL)])

    assert list(df["status"]) == ["High"]
    assert df.loc[0, "recorded_at"] == datetime(2024, 6, 14, 7, 15)


def test_readings_to_dataframe_empty_keeps_columns():
    df = readings_to_dataframe([])
    assert df.empty
    assert "status" in df.columns
