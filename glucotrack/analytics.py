from __future__ import annotations

from datetime import datetime, time
from typing import Iterable

import pandas as pd

from glucotrack.models import (
    LOOKBACK_DAYS,
    DateRange,
    FilterRange,
    GlucoseStatus,
    Reading,
    ReadingType,
    Stats,
)

DAY_MS = 24 * 60 * 60 * 1000
LOW_THRESHOLD = 70

# (normal ceiling, elevated ceiling), both inclusive
_THRESHOLDS = {
    ReadingType.FASTING: (100, 125),
    ReadingType.PRE_MEAL: (100, 125),
    ReadingType.AFTER_MEAL: (140, 180),
    ReadingType.BEDTIME: (140, 180),
}

DATAFRAME_COLUMNS = ["id", "recorded_at", "date", "time", "type", "value", "status"]


def to_epoch_ms(moment: datetime) -> int:
    return int(round(moment.timestamp() * 1000))


def end_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time(23, 59, 59, 999000))


def classify_status(value: int, reading_type: ReadingType) -> GlucoseStatus:
    if value < LOW_THRESHOLD:
        return GlucoseStatus.LOW

    normal_ceiling, elevated_ceiling = _THRESHOLDS[ReadingType(reading_type)]
    if value <= normal_ceiling:
        return GlucoseStatus.NORMAL
    if value <= elevated_ceiling:
        return GlucoseStatus.ELEVATED
    return GlucoseStatus.HIGH


def compute_window(
    filter_range: FilterRange,
    custom_range: DateRange | None = None,
    now: datetime | None = None,
) -> tuple[int, int]:
    """Return the inclusive (start_ms, end_ms) window for a filter selection.

    Everything is local wall-clock time. Relative windows subtract a fixed
    number of milliseconds, so a DST change inside the window shifts the lower
    bound by an hour instead of landing on midnight.
    """
    filter_range = FilterRange(filter_range)
    if filter_range is FilterRange.CUSTOM:
        if custom_range is None:
            raise ValueError("A custom filter needs a start and end date.")
        start = datetime.combine(custom_range.start, time.min)
        end = end_of_day(datetime.combine(custom_range.end, time.min))
        return to_epoch_ms(start), to_epoch_ms(end)

    end_ms = to_epoch_ms(end_of_day(now or datetime.now()))
    return end_ms - LOOKBACK_DAYS[filter_range] * DAY_MS, end_ms


def filter_readings(
    readings: Iterable[Reading],
    filter_range: FilterRange,
    custom_range: DateRange | None = None,
    now: datetime | None = None,
) -> list[Reading]:
    start_ms, end_ms = compute_window(filter_range, custom_range, now)
    selected = [r for r in readings if start_ms <= r.timestamp <= end_ms]
    return sorted(selected, key=lambda r: r.timestamp, reverse=True)


def compute_stats(readings: Iterable[Reading]) -> Stats:
    values = [r.value for r in readings]
    if not values:
        return Stats(avg=0, min=0, max=0, count=0)

    count = len(values)
    total = sum(values)
    # integer round-half-up of total / count
    avg = (2 * total + count) // (2 * count)
    return Stats(avg=avg, min=min(values), max=max(values), count=count)


def status_breakdown(readings: Iterable[Reading]) -> dict[GlucoseStatus, int]:
    counts = {status: 0 for status in GlucoseStatus}
    for reading in readings:
        counts[classify_status(reading.value, reading.type)] += 1
    return counts


def readings_to_dataframe(readings: Iterable[Reading]) -> pd.DataFrame:
    rows = [
        {
            "id": r.id,
            "recorded_at": r.recorded_at,
            "date": r.date,
            "time": r.time,
            "type": r.type.value,
            "value": r.value,
            "status": classify_status(r.value, r.type).value,
        }
        for r in readings
    ]
    if not rows:
        return pd.DataFrame(columns=DATAFRAME_COLUMNS)

    df = pd.DataFrame(rows, columns=DATAFRAME_COLUMNS)
    df["recorded_at"] = pd.to_datetime(df["recorded_at"])
    return df
