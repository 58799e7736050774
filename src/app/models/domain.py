"""Domain models for merchant schedules, delivery fees and rider positions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum, IntEnum
from typing import Mapping, Optional


class Weekday(IntEnum):
    """Day of week indexed the way operating hours are keyed (0=Sunday)."""

    SUN = 0
    MON = 1
    TUE = 2
    WED = 3
    THU = 4
    FRI = 5
    SAT = 6

    @property
    def abbreviation(self) -> str:
        return self.name.title()

    @classmethod
    def from_datetime(cls, moment: datetime) -> "Weekday":
        # isoweekday(): Monday=1 .. Sunday=7
        return cls(moment.isoweekday() % 7)

    @classmethod
    def from_abbreviation(cls, value: str) -> "Weekday":
        try:
            return cls[value.strip().upper()]
        except KeyError as exc:
            raise ValueError(f"Unknown weekday '{value}'") from exc

    def shift(self, days: int) -> "Weekday":
        return Weekday((self.value + days) % 7)


@dataclass(frozen=True, slots=True)
class DayWindow:
    """One weekday's open flag plus opening and closing time of day."""

    is_open: bool
    open: Optional[time] = None
    close: Optional[time] = None

    def __post_init__(self) -> None:
        if self.is_open and (self.open is None or self.close is None):
            raise ValueError("open and close times are required when the day is open")

    @property
    def is_overnight(self) -> bool:
        return self.is_open and self.close < self.open


@dataclass(frozen=True, slots=True)
class WeeklySchedule:
    """Operating hours for all seven weekdays; days without an entry are None."""

    days: Mapping[Weekday, Optional[DayWindow]]

    def __post_init__(self) -> None:
        exhaustive = {day: self.days.get(day) for day in Weekday}
        object.__setattr__(self, "days", exhaustive)

    def window(self, day: Weekday) -> Optional[DayWindow]:
        return self.days[day]


@dataclass(frozen=True, slots=True)
class AvailabilityResult:
    is_open: bool
    next_open_hint: Optional[str] = None


class FeeOverridePolicy(str, Enum):
    """How a matched order-amount tier combines with the distance band fee."""

    REPLACE = "replace"
    ADDITIVE = "additive"


@dataclass(frozen=True, slots=True)
class OrderAmountFeeTier:
    min_order_amount: float
    max_order_amount: Optional[float]
    fee: float

    def matches(self, amount: float) -> bool:
        if amount < self.min_order_amount:
            return False
        return self.max_order_amount is None or amount < self.max_order_amount


@dataclass(frozen=True, slots=True)
class DistanceFeeTier:
    """A distance band [min_distance, max_distance) with its fee configuration."""

    min_distance: float
    max_distance: float
    fee: float
    base_fee: Optional[float] = None
    order_tiers: tuple[OrderAmountFeeTier, ...] = ()
    config_id: Optional[str] = None

    def contains(self, distance_km: float) -> bool:
        return self.min_distance <= distance_km < self.max_distance

    @property
    def default_fee(self) -> float:
        return self.base_fee if self.base_fee is not None else self.fee


@dataclass(frozen=True, slots=True)
class FeeSchedule:
    """Ordered, contiguous distance tiers. Build with ``build_fee_schedule``."""

    tiers: tuple[DistanceFeeTier, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class TripRoute:
    """Trip length between two points. ``duration_seconds`` is None for straight-line estimates."""

    distance_km: float
    duration_seconds: Optional[float] = None
    source: str = "straight_line"


@dataclass(frozen=True, slots=True)
class Position:
    latitude: float
    longitude: float
    timestamp: float


class ReporterState(str, Enum):
    OFFLINE = "offline"
    ONLINE = "online"
    ERROR = "error"
