from __future__ import annotations

from glucotrack.models import DateRange, FilterRange
from glucotrack.validation import parse_date, parse_time

FILTER_LABELS = {
    FilterRange.THREE_DAYS: "3 Days",
    FilterRange.ONE_WEEK: "1 Week",
    FilterRange.ONE_MONTH: "1 Month",
    FilterRange.CUSTOM: "Custom",
}


def format_date(date_str: str) -> str:
    """'2024-01-05' -> 'Jan 5, 2024'"""
    parsed = parse_date(date_str)
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


def format_time(time_str: str) -> str:
    """'13:05' -> '1:05 PM'"""
    parsed = parse_time(time_str)
    hour = parsed.hour % 12 or 12
    suffix = "PM" if parsed.hour >= 12 else "AM"
    return f"{hour}:{parsed.minute:02d} {suffix}"


def range_label(filter_range: FilterRange, custom_range: DateRange | None = None) -> str:
    filter_range = FilterRange(filter_range)
    if filter_range is FilterRange.CUSTOM and custom_range is not None:
        return f"{custom_range.start.isoformat()} to {custom_range.end.isoformat()}"
    return FILTER_LABELS[filter_range]
