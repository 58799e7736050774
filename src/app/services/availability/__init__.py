"""Merchant availability evaluation."""

from .evaluator import evaluate, evaluate_availability, merchant_now, next_open_hint
from .schedule import ScheduleParseError, parse_schedule

__all__ = [
    "evaluate",
    "evaluate_availability",
    "merchant_now",
    "next_open_hint",
    "parse_schedule",
    "ScheduleParseError",
]
