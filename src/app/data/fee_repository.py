"""Delivery fee schedule loader with database-first approach, falling back to a JSON file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from ..config import settings
from ..models.domain import FeeSchedule
from ..persistence.fee_configs import list_fee_configs
from ..services.fees.schedule import (
    FeeScheduleError,
    build_fee_schedule,
    default_fee_schedule,
    parse_fee_schedule,
)

logger = logging.getLogger(__name__)


def _load_from_database(client: Any | None = None) -> Optional[FeeSchedule]:
    configs = list_fee_configs(client)
    if not configs:
        return None
    try:
        return build_fee_schedule(configs)
    except FeeScheduleError as e:
        logger.error(f"Delivery fee configs in database are invalid: {e}")
        return None


def _load_from_file(source: Optional[Path] = None) -> Optional[FeeSchedule]:
    path = source or settings.fee_schedule_file
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        schedule = parse_fee_schedule(payload)
    except (OSError, json.JSONDecodeError, FeeScheduleError) as e:
        logger.error(f"Fee schedule file '{path}' is invalid: {e}")
        return None
    return schedule if schedule.tiers else None


def load_fee_schedule(client: Any | None = None, source: Optional[Path] = None) -> FeeSchedule:
    """Return the active fee schedule: database, then file, then the seeded defaults."""

    schedule = _load_from_database(client)
    if schedule is not None:
        return schedule

    schedule = _load_from_file(source)
    if schedule is not None:
        return schedule

    logger.info("No stored delivery fee configuration; using seeded default tiers")
    return default_fee_schedule()
