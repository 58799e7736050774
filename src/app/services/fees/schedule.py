"""Construction and validation of distance fee schedules."""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping, Sequence

from pydantic import ValidationError

from ...models.domain import DistanceFeeTier, FeeSchedule, OrderAmountFeeTier
from ...schemas.delivery_fee import DeliveryFeeConfigModel

# Seeded bands: [0,10) -> 50, [10,20) -> 80, [20,30) -> 120, [30,1000) -> 200
DEFAULT_FEE_TIERS: tuple[dict[str, float], ...] = (
    {"minDistance": 0, "maxDistance": 10, "fee": 50},
    {"minDistance": 10, "maxDistance": 20, "fee": 80},
    {"minDistance": 20, "maxDistance": 30, "fee": 120},
    {"minDistance": 30, "maxDistance": 1000, "fee": 200},
)


class FeeScheduleError(ValueError):
    """Raised when fee tiers overlap, leave gaps, or cannot be read."""


def tier_from_model(model: DeliveryFeeConfigModel) -> DistanceFeeTier:
    order_tiers = tuple(
        OrderAmountFeeTier(
            min_order_amount=tier.min_order_amount,
            max_order_amount=tier.max_order_amount,
            fee=tier.fee,
        )
        for tier in model.tiers
    )
    return DistanceFeeTier(
        min_distance=model.min_distance,
        max_distance=model.max_distance,
        fee=model.fee if model.fee is not None else model.base_fee,
        base_fee=model.base_fee,
        order_tiers=order_tiers,
        config_id=model.id,
    )


def _coerce_tier(record: Any) -> DistanceFeeTier:
    if isinstance(record, DistanceFeeTier):
        return record
    if isinstance(record, DeliveryFeeConfigModel):
        return tier_from_model(record)
    try:
        return tier_from_model(DeliveryFeeConfigModel.model_validate(record))
    except ValidationError as exc:
        raise FeeScheduleError(f"Invalid fee configuration record: {exc}") from exc


def validate_tiers(tiers: Sequence[DistanceFeeTier], *, allow_gaps: bool = False) -> None:
    """Reject overlapping or gapped bands. ``tiers`` must be sorted by min_distance.

    ``allow_gaps`` keeps overlap and per-band checks but tolerates holes, for
    admin edits that build the table one band at a time.
    """

    for tier in tiers:
        if tier.max_distance <= tier.min_distance:
            raise FeeScheduleError(
                f"Tier [{tier.min_distance}, {tier.max_distance}) has a non-positive width"
            )
        if tier.fee < 0 or (tier.base_fee is not None and tier.base_fee < 0):
            raise FeeScheduleError(f"Tier [{tier.min_distance}, {tier.max_distance}) has a negative fee")
        if any(order_tier.fee < 0 for order_tier in tier.order_tiers):
            raise FeeScheduleError(
                f"Tier [{tier.min_distance}, {tier.max_distance}) has a negative order-amount fee"
            )

    for previous, current in zip(tiers, tiers[1:]):
        if current.min_distance < previous.max_distance:
            raise FeeScheduleError(
                f"Tiers [{previous.min_distance}, {previous.max_distance}) and "
                f"[{current.min_distance}, {current.max_distance}) overlap"
            )
        if current.min_distance > previous.max_distance and not allow_gaps:
            raise FeeScheduleError(
                f"Gap between {previous.max_distance} km and {current.min_distance} km"
            )


def build_fee_schedule(records: Iterable[Any]) -> FeeSchedule:
    """Build a validated schedule from wire records, models, or domain tiers."""

    tiers = sorted((_coerce_tier(record) for record in records), key=lambda tier: tier.min_distance)
    validate_tiers(tiers)
    return FeeSchedule(tiers=tuple(tiers))


def parse_fee_schedule(raw: Any) -> FeeSchedule:
    """Accept a schedule, a list of records, ``{"configs": [...]}``, or serialized JSON."""

    if isinstance(raw, FeeSchedule):
        return raw
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise FeeScheduleError(f"Fee configuration is not valid JSON: {exc}") from exc
    if isinstance(raw, Mapping):
        raw = raw.get("configs")
    if not isinstance(raw, (list, tuple)):
        raise FeeScheduleError("Fee configuration must be a list of distance tiers")
    return build_fee_schedule(raw)


def default_fee_schedule() -> FeeSchedule:
    return build_fee_schedule(DEFAULT_FEE_TIERS)


def schedule_gaps(tiers: Sequence[DistanceFeeTier]) -> list[tuple[float, float]]:
    """Uncovered ``(from_km, to_km)`` ranges between sorted bands."""

    return [
        (previous.max_distance, current.min_distance)
        for previous, current in zip(tiers, tiers[1:])
        if current.min_distance > previous.max_distance
    ]
