from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any


class ReadingType(str, Enum):
    FASTING = "Fasting"
    PRE_MEAL = "Pre-Meal"
    AFTER_MEAL = "After Meal"
    BEDTIME = "Bedtime"


class GlucoseStatus(str, Enum):
    LOW = "Low"
    NORMAL = "Normal"
    ELEVATED = "Elevated"
    HIGH = "High"


class FilterRange(str, Enum):
    THREE_DAYS = "3Days"
    ONE_WEEK = "1Week"
    ONE_MONTH = "1Month"
    CUSTOM = "Custom"


LOOKBACK_DAYS = {
    FilterRange.THREE_DAYS: 3,
    FilterRange.ONE_WEEK: 7,
    FilterRange.ONE_MONTH: 30,
}

_READING_KEYS = ("id", "date", "time", "value", "type", "timestamp")


@dataclass(frozen=True)
class Reading:
    id: str
    date: str
    time: str
    value: int
    type: ReadingType
    timestamp: int

    @property
    def recorded_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "time": self.time,
            "value": self.value,
            "type": self.type.value,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Reading":
        missing = [key for key in _READING_KEYS if key not in raw]
        if missing:
            raise ValueError(f"Reading is missing fields: {', '.join(missing)}")
        value = raw["value"]
        timestamp = raw["timestamp"]
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Reading value must be an integer, got {value!r}")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError(f"Reading timestamp must be numeric, got {timestamp!r}")
        if not math.isfinite(timestamp):
            raise ValueError(f"Reading timestamp must be finite, got {timestamp!r}")
        return cls(
            id=str(raw["id"]),
            date=str(raw["date"]),
            time=str(raw["time"]),
            value=value,
            type=ReadingType(raw["type"]),
            timestamp=int(timestamp),
        )


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    @classmethod
    def last_days(cls, days: int, today: date | None = None) -> "DateRange":
        end = today or date.today()
        return cls(start=end - timedelta(days=days), end=end)


@dataclass
class Stats:
    avg: int
    min: int
    max: int
    count: int
