"""Parsing of merchant operating hours into a ``WeeklySchedule``."""

from __future__ import annotations

import json
from datetime import time
from typing import Any, Mapping

from pydantic import ValidationError

from ...models.domain import DayWindow, Weekday, WeeklySchedule
from ...schemas.availability import DayWindowModel, parse_hhmm


class ScheduleParseError(ValueError):
    """Raised when operating hours cannot be read into a weekly schedule."""


def _to_time(value: str | None) -> time | None:
    if value is None:
        return None
    hour, minute = parse_hhmm(value)
    return time(hour, minute)


def _day_window(model: DayWindowModel) -> DayWindow:
    return DayWindow(is_open=model.is_open, open=_to_time(model.open), close=_to_time(model.close))


def parse_schedule(raw: Any) -> WeeklySchedule:
    """Read operating hours given as a schedule, a mapping, or serialized JSON.

    Keys are weekday abbreviations (``Sun`` .. ``Sat``, case-insensitive). Days
    may be missing or ``null``; unknown keys or malformed windows raise
    ``ScheduleParseError``.
    """

    if isinstance(raw, WeeklySchedule):
        return raw

    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ScheduleParseError(f"Operating hours are not valid JSON: {exc}") from exc

    if not isinstance(raw, Mapping):
        raise ScheduleParseError(f"Operating hours must be an object, got {type(raw).__name__}")

    days: dict[Weekday, DayWindow | None] = {}
    for key, value in raw.items():
        try:
            day = Weekday.from_abbreviation(str(key))
        except ValueError as exc:
            raise ScheduleParseError(str(exc)) from exc
        if day in days:
            raise ScheduleParseError(f"Duplicate entry for {day.abbreviation}")
        if value is None:
            days[day] = None
            continue
        try:
            days[day] = _day_window(DayWindowModel.model_validate(value))
        except ValidationError as exc:
            raise ScheduleParseError(f"Invalid hours for {day.abbreviation}: {exc}") from exc
    return WeeklySchedule(days=days)
