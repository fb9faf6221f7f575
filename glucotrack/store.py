from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime
from typing import Callable

from glucotrack.analytics import to_epoch_ms
from glucotrack.db import READINGS_KEY, KeyValueStore
from glucotrack.models import Reading, ReadingType
from glucotrack.validation import parse_date, parse_time, validate_date, validate_time

logger = logging.getLogger(__name__)

Listener = Callable[[list[Reading]], None]


def create_reading(date_str: str, time_str: str, value: int, reading_type: ReadingType) -> Reading:
    """Build a new reading; the timestamp is fixed here from the local date and time."""
    for ok, message in (validate_date(date_str), validate_time(time_str)):
        if not ok:
            raise ValueError(message)
    moment = datetime.combine(parse_date(date_str), parse_time(time_str))
    return Reading(
        id=uuid.uuid4().hex,
        date=date_str,
        time=time_str,
        value=int(value),
        type=ReadingType(reading_type),
        timestamp=to_epoch_ms(moment),
    )


class ReadingStore:
    """In-memory reading list, newest entry first, backed by a key-value blob."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv
        self._readings: list[Reading] = []
        self._listeners: list[Listener] = []

    @property
    def readings(self) -> list[Reading]:
        return list(self._readings)

    def __len__(self) -> int:
        return len(self._readings)

    def load(self) -> list[Reading]:
        raw = self._kv.get(READINGS_KEY)
        self._readings = self._decode(raw) if raw else []
        return self.readings

    def save(self) -> None:
        payload = [r.to_dict() for r in self._readings]
        self._kv.set(READINGS_KEY, json.dumps(payload, ensure_ascii=False))

    def add(self, reading: Reading) -> None:
        self._readings.insert(0, reading)
        self._notify()

    def delete(self, reading_id: str) -> bool:
        remaining = [r for r in self._readings if r.id != reading_id]
        if len(remaining) == len(self._readings):
            return False
        self._readings = remaining
        self._notify()
        return True

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.readings
        for listener in list(self._listeners):
            listener(snapshot)

    @staticmethod
    def _decode(raw: str) -> list[Reading]:
        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise ValueError("stored readings are not a list")
            return [Reading.from_dict(item) for item in payload]
        except (ValueError, TypeError, KeyError, OverflowError) as exc:
            logger.warning("Discarding unreadable stored readings", extra={"reason": str(exc)})
            return []
