"""Safe temperature ranges (°C) per reading type."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional, Tuple


class TemperatureType(str, Enum):
    FRIDGE = "fridge"
    FREEZER = "freezer"
    FOOD = "food"
    DELIVERY = "delivery"


@dataclass(frozen=True)
class TemperatureRange:
    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


TEMPERATURE_RANGES = MappingProxyType({
    TemperatureType.FRIDGE: TemperatureRange(0, 5),
    TemperatureType.FREEZER: TemperatureRange(-25, -18),
    TemperatureType.FOOD: TemperatureRange(63, 100),
    TemperatureType.DELIVERY: TemperatureRange(-100, 100),  # effectively unbounded
})


def get_range(temperature_type: Any) -> Optional[TemperatureRange]:
    try:
        return TEMPERATURE_RANGES[TemperatureType(temperature_type)]
    except (ValueError, TypeError):
        return None


def is_out_of_range(temperature_type: Any, value: float) -> bool:
    """Readings of an unknown type are never flagged"""
    temperature_range = get_range(temperature_type)
    if temperature_range is None:
        return False
    return not temperature_range.contains(value)


def get_record_day_window(now: Optional[datetime] = None, day_start_hour: int = 2) -> Tuple[datetime, datetime]:
    """
    [start, end) of the log day containing now.
    A log day starts at day_start_hour UTC, so readings just after midnight
    still belong to the previous day's shift.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    start = now.replace(hour=day_start_hour, minute=0, second=0, microsecond=0)
    if now.hour < day_start_hour:
        start -= timedelta(days=1)
    return start, start + timedelta(days=1)
