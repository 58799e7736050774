"""Merchant open/closed evaluation against weekly operating hours."""

from __future__ import annotations

import logging
from datetime import datetime, time
from typing import Any, Optional
from zoneinfo import ZoneInfo

from ...config import settings
from ...models.domain import AvailabilityResult, DayWindow, Weekday, WeeklySchedule
from .schedule import ScheduleParseError, parse_schedule

logger = logging.getLogger(__name__)


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _format_time(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def _window_contains(window: DayWindow, current_minutes: int) -> bool:
    open_minutes = _minutes(window.open)
    close_minutes = _minutes(window.close)
    if close_minutes < open_minutes:
        return current_minutes >= open_minutes or current_minutes < close_minutes
    return open_minutes <= current_minutes < close_minutes


def _spills_into(window: Optional[DayWindow], current_minutes: int) -> bool:
    """True when yesterday's overnight window is still running this morning."""

    if window is None or not window.is_open or not window.is_overnight:
        return False
    return current_minutes < _minutes(window.close)


def next_open_hint(schedule: WeeklySchedule, today: Weekday) -> Optional[str]:
    """Describe the first open day after ``today``, looking at most one week ahead."""

    for offset in range(1, 8):
        day = today.shift(offset)
        window = schedule.window(day)
        if window is not None and window.is_open:
            return f"{day.abbreviation} {_format_time(window.open)}"
    return None


def evaluate(schedule: WeeklySchedule, now: datetime) -> AvailabilityResult:
    """Decide whether the merchant is open at ``now`` (wall-clock time)."""

    today = Weekday.from_datetime(now)
    current_minutes = now.hour * 60 + now.minute
    window = schedule.window(today)

    if _spills_into(schedule.window(today.shift(-1)), current_minutes):
        return AvailabilityResult(is_open=True)

    if window is None or not window.is_open:
        return AvailabilityResult(is_open=False, next_open_hint=next_open_hint(schedule, today))

    if _window_contains(window, current_minutes):
        return AvailabilityResult(is_open=True)

    if current_minutes < _minutes(window.open):
        return AvailabilityResult(is_open=False, next_open_hint=f"Opens today {_format_time(window.open)}")
    return AvailabilityResult(is_open=False, next_open_hint=next_open_hint(schedule, today))


def merchant_now(timezone_name: str | None = None) -> datetime:
    """Current wall-clock time in the merchant time zone."""

    return datetime.now(ZoneInfo(timezone_name or settings.merchant_timezone))


def evaluate_availability(
    raw_schedule: Any,
    now: datetime | None = None,
    *,
    default_open: bool | None = None,
) -> AvailabilityResult:
    """Evaluate possibly missing or malformed operating hours without raising.

    Absent or unreadable hours fall back to ``default_open`` (the merchant's
    manual flag, or the configured default when that is unset). An aware
    ``now`` is converted to the merchant time zone; a naive one is taken as
    merchant-local already.
    """

    fallback = settings.default_merchant_open if default_open is None else default_open
    if raw_schedule is None:
        return AvailabilityResult(is_open=fallback)

    try:
        schedule = parse_schedule(raw_schedule)
    except ScheduleParseError as exc:
        logger.warning(f"Unreadable operating hours, using default open={fallback}: {exc}")
        return AvailabilityResult(is_open=fallback)

    if now is None:
        now = merchant_now()
    elif now.tzinfo is not None:
        now = now.astimezone(ZoneInfo(settings.merchant_timezone))
    return evaluate(schedule, now)
