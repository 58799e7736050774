"""Pydantic models for operating hours and availability endpoints."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_hhmm(value: str) -> tuple[int, int]:
    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Time '{value}' is not in HH:MM format")
    hour, minute = int(match.group(1)), int(match.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Time '{value}' is out of range")
    return hour, minute


class DayWindowModel(BaseModel):
    """Wire shape of one day: ``{"isOpen": true, "open": "09:00", "close": "22:00"}``."""

    model_config = ConfigDict(populate_by_name=True)

    is_open: bool = Field(default=False, alias="isOpen")
    open: Optional[str] = None
    close: Optional[str] = None

    @field_validator("open", "close")
    @classmethod
    def _validate_time(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        hour, minute = parse_hhmm(value)
        return f"{hour:02d}:{minute:02d}"

    @model_validator(mode="after")
    def _require_times_when_open(self) -> "DayWindowModel":
        if self.is_open and (self.open is None or self.close is None):
            raise ValueError("open and close are required when isOpen is true")
        return self


class AvailabilityRequest(BaseModel):
    operating_hours: Optional[Union[dict[str, Any], str]] = Field(
        default=None,
        description="Weekly schedule keyed by weekday abbreviation, as an object or JSON string.",
    )
    is_open: Optional[bool] = Field(
        default=None,
        description="Manual open flag used when operating hours are missing or unreadable.",
    )
    at: Optional[datetime] = Field(default=None, description="Evaluation time; defaults to now.")


class AvailabilityResponse(BaseModel):
    is_open: bool
    next_open: Optional[str] = None
