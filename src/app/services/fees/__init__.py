"""Delivery fee schedules and resolution."""

from .resolver import resolve, resolve_fee, select_tier
from .schedule import (
    DEFAULT_FEE_TIERS,
    FeeScheduleError,
    build_fee_schedule,
    default_fee_schedule,
    parse_fee_schedule,
    schedule_gaps,
    tier_from_model,
    validate_tiers,
)

__all__ = [
    "DEFAULT_FEE_TIERS",
    "FeeScheduleError",
    "build_fee_schedule",
    "default_fee_schedule",
    "parse_fee_schedule",
    "resolve",
    "resolve_fee",
    "schedule_gaps",
    "select_tier",
    "tier_from_model",
    "validate_tiers",
]
