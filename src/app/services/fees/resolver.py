"""Delivery fee resolution from distance bands and order-amount tiers."""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

from ...config import settings
from ...models.domain import DistanceFeeTier, FeeOverridePolicy, FeeSchedule
from .schedule import FeeScheduleError, parse_fee_schedule

logger = logging.getLogger(__name__)


def select_tier(schedule: FeeSchedule, distance_km: float) -> DistanceFeeTier:
    """Return the band containing ``distance_km``, or the nearest boundary band."""

    if not schedule.tiers:
        raise FeeScheduleError("Fee schedule has no tiers")

    for tier in schedule.tiers:
        if tier.contains(distance_km):
            return tier

    first, last = schedule.tiers[0], schedule.tiers[-1]
    if distance_km < first.min_distance:
        logger.warning(f"Distance {distance_km} km is below the first fee tier; using {first.min_distance} km band")
        return first
    logger.warning(f"Distance {distance_km} km is beyond the last fee tier; using {last.min_distance} km band")
    return last


def resolve(
    schedule: FeeSchedule,
    distance_km: float,
    order_amount: Optional[float] = None,
    *,
    policy: FeeOverridePolicy = FeeOverridePolicy.REPLACE,
) -> float:
    """Compute the delivery fee for a trip.

    The distance band supplies the fee. When an order amount is given and the
    band carries order-amount tiers, the first matching tier overrides it
    (``REPLACE``) or is added on top of the band's base fee (``ADDITIVE``).
    Without a matching tier the band's base fee applies when set.
    """

    tier = select_tier(schedule, distance_km)

    if order_amount is not None:
        for order_tier in tier.order_tiers:
            if order_tier.matches(order_amount):
                if policy is FeeOverridePolicy.ADDITIVE:
                    return max(0.0, tier.default_fee + order_tier.fee)
                return max(0.0, order_tier.fee)

    return max(0.0, tier.default_fee)


def resolve_fee(
    raw_schedule: Any,
    distance_km: float,
    order_amount: Optional[float] = None,
    *,
    policy: FeeOverridePolicy | str | None = None,
    fallback_fee: float | None = None,
) -> float:
    """Resolve a fee from possibly malformed configuration without raising."""

    fallback = settings.fallback_delivery_fee if fallback_fee is None else fallback_fee
    effective_policy = FeeOverridePolicy(policy or settings.fee_override_policy)

    if raw_schedule is None:
        logger.warning(f"No fee configuration available, charging fallback fee {fallback}")
        return fallback

    try:
        schedule = parse_fee_schedule(raw_schedule)
    except FeeScheduleError as exc:
        logger.warning(f"Unreadable fee configuration, charging fallback fee {fallback}: {exc}")
        return fallback

    if not schedule.tiers:
        logger.warning(f"Fee configuration has no tiers, charging fallback fee {fallback}")
        return fallback

    if distance_km is None or not math.isfinite(distance_km) or distance_km < 0:
        lowest = schedule.tiers[0]
        logger.warning(f"Invalid distance {distance_km!r}; using lowest fee tier")
        return max(0.0, lowest.default_fee)

    return resolve(schedule, distance_km, order_amount, policy=effective_policy)
