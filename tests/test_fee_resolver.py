import math

import pytest

from src.app.models.domain import DistanceFeeTier, FeeOverridePolicy, OrderAmountFeeTier
from src.app.services.fees import (
    DEFAULT_FEE_TIERS,
    FeeScheduleError,
    build_fee_schedule,
    default_fee_schedule,
    parse_fee_schedule,
    resolve,
    resolve_fee,
    schedule_gaps,
    select_tier,
    tier_from_model,
    validate_tiers,
)


@pytest.fixture
def seeded_schedule():
    return default_fee_schedule()


@pytest.fixture
def tiered_schedule():
    return build_fee_schedule(
        [
            {
                "minDistance": 0,
                "maxDistance": 5,
                "fee": 40,
                "baseFee": 45,
                "tiers": [
                    {"minOrderAmount": 0, "maxOrderAmount": 500, "fee": 60},
                    {"minOrderAmount": 500, "maxOrderAmount": 1000, "fee": 30},
                    {"minOrderAmount": 1000, "fee": 0},
                ],
            },
            {"minDistance": 5, "maxDistance": 100, "fee": 90},
        ]
    )


@pytest.mark.parametrize(
    "distance, expected",
    [(0, 50), (9.99, 50), (10.0, 80), (19.999, 80), (20, 120), (29.5, 120), (30, 200), (999.99, 200)],
)
def test_seeded_distance_bands(seeded_schedule, distance, expected):
    assert resolve(seeded_schedule, distance) == expected


def test_every_distance_inside_a_band_resolves_to_its_fee(seeded_schedule):
    for tier in seeded_schedule.tiers:
        step = (tier.max_distance - tier.min_distance) / 50
        samples = [tier.min_distance + step * i for i in range(50)]
        assert {resolve(seeded_schedule, sample) for sample in samples} == {tier.fee}


def test_distance_beyond_last_band_uses_last_fee(seeded_schedule, caplog):
    assert resolve(seeded_schedule, 1000) == 200
    assert resolve(seeded_schedule, 25_000) == 200
    assert "beyond the last fee tier" in caplog.text


def test_distance_below_first_band_uses_first_fee():
    schedule = build_fee_schedule([{"minDistance": 2, "maxDistance": 10, "fee": 70}])

    assert resolve(schedule, 0.5) == 70
    assert select_tier(schedule, 0.5).min_distance == 2


def test_order_amount_tier_replaces_distance_fee(tiered_schedule):
    assert resolve(tiered_schedule, 2, 100) == 60
    assert resolve(tiered_schedule, 2, 500) == 30
    assert resolve(tiered_schedule, 2, 999.99) == 30
    assert resolve(tiered_schedule, 2, 5000) == 0


def test_order_amount_tier_added_to_base_fee(tiered_schedule):
    policy = FeeOverridePolicy.ADDITIVE

    assert resolve(tiered_schedule, 2, 100, policy=policy) == 45 + 60
    assert resolve(tiered_schedule, 2, 750, policy=policy) == 45 + 30
    assert resolve(tiered_schedule, 2, 1500, policy=policy) == 45


def test_additive_policy_uses_band_fee_without_base_fee():
    schedule = build_fee_schedule(
        [{"minDistance": 0, "maxDistance": 10, "fee": 50, "tiers": [{"minOrderAmount": 0, "fee": 15}]}]
    )

    assert resolve(schedule, 3, 200, policy=FeeOverridePolicy.ADDITIVE) == 65
    assert resolve(schedule, 3, 200, policy=FeeOverridePolicy.REPLACE) == 15


def test_base_fee_used_when_no_order_tier_matches():
    schedule = build_fee_schedule(
        [
            {
                "minDistance": 0,
                "maxDistance": 10,
                "fee": 50,
                "baseFee": 55,
                "tiers": [{"minOrderAmount": 300, "maxOrderAmount": 600, "fee": 20}],
            }
        ]
    )

    assert resolve(schedule, 3, 100) == 55
    assert resolve(schedule, 3, 600) == 55
    assert resolve(schedule, 3) == 55
    assert resolve(schedule, 3, 300) == 20


def test_order_tiers_ignored_without_order_amount(tiered_schedule):
    assert resolve(tiered_schedule, 2) == 45
    assert resolve(tiered_schedule, 50, 100) == 90


def test_base_fee_alone_defines_band_fee():
    schedule = build_fee_schedule([{"minDistance": 0, "maxDistance": 10, "baseFee": 35}])

    assert resolve(schedule, 1) == 35


def test_order_tier_match_is_half_open():
    tier = OrderAmountFeeTier(min_order_amount=100, max_order_amount=200, fee=10)

    assert tier.matches(100)
    assert tier.matches(199.99)
    assert not tier.matches(200)
    assert not tier.matches(99.99)
    assert OrderAmountFeeTier(min_order_amount=100, max_order_amount=None, fee=0).matches(10**9)


def test_build_fee_schedule_sorts_tiers():
    schedule = build_fee_schedule(reversed(DEFAULT_FEE_TIERS))

    assert [tier.min_distance for tier in schedule.tiers] == [0, 10, 20, 30]


@pytest.mark.parametrize(
    "records, message",
    [
        (
            [{"minDistance": 0, "maxDistance": 10, "fee": 50}, {"minDistance": 8, "maxDistance": 20, "fee": 80}],
            "overlap",
        ),
        (
            [{"minDistance": 0, "maxDistance": 10, "fee": 50}, {"minDistance": 12, "maxDistance": 20, "fee": 80}],
            "Gap",
        ),
        ([{"minDistance": 10, "maxDistance": 10, "fee": 50}], "Invalid"),
        ([{"minDistance": 0, "maxDistance": 10, "fee": -5}], "Invalid"),
        ([{"minDistance": 0, "maxDistance": 10}], "Invalid"),
        ([{"minDistance": 0, "maxDistance": 10, "fee": 5, "tiers": [{"minOrderAmount": 50, "maxOrderAmount": 10, "fee": 1}]}], "Invalid"),
    ],
)
def test_build_fee_schedule_rejects_malformed_tiers(records, message):
    with pytest.raises(FeeScheduleError, match=message):
        build_fee_schedule(records)


def test_validation_applies_to_domain_tiers():
    with pytest.raises(FeeScheduleError, match="negative fee"):
        build_fee_schedule([DistanceFeeTier(min_distance=0, max_distance=5, fee=-1)])


def test_parse_fee_schedule_accepts_json_and_wrapped_configs():
    text = '{"configs": [{"minDistance": 0, "maxDistance": 3, "fee": 25}, {"minDistance": 3, "maxDistance": 9, "fee": 35}]}'

    schedule = parse_fee_schedule(text)

    assert [tier.fee for tier in schedule.tiers] == [25, 35]
    assert parse_fee_schedule(schedule) is schedule


@pytest.mark.parametrize("raw", ["not json", "42", {"unexpected": []}, 7])
def test_parse_fee_schedule_rejects_unreadable_configuration(raw):
    with pytest.raises(FeeScheduleError):
        parse_fee_schedule(raw)


def test_resolve_fee_degrades_to_fallback_for_unreadable_configuration(caplog):
    assert resolve_fee("{oops", 4.0, fallback_fee=50) == 50
    assert resolve_fee(None, 4.0, fallback_fee=65) == 65
    assert resolve_fee([], 4.0, fallback_fee=50) == 50
    assert "fallback fee" in caplog.text


def test_resolve_fee_uses_lowest_tier_for_invalid_distance(seeded_schedule):
    assert resolve_fee(seeded_schedule, math.nan) == 50
    assert resolve_fee(seeded_schedule, -3) == 50
    assert resolve_fee(seeded_schedule, math.inf) == 50


def test_resolve_fee_honours_configured_policy(monkeypatch, tiered_schedule):
    from src.app.config import settings

    monkeypatch.setattr(settings, "fee_override_policy", "additive")

    assert resolve_fee(tiered_schedule, 2, 100) == 105
    assert resolve_fee(tiered_schedule, 2, 100, policy="replace") == 60


def test_resolve_fee_with_raw_records():
    assert resolve_fee(list(DEFAULT_FEE_TIERS), 15) == 80


def test_resolved_fee_is_never_negative():
    schedule = build_fee_schedule([{"minDistance": 0, "maxDistance": 10, "fee": 0, "tiers": [{"minOrderAmount": 0, "fee": 0}]}])

    for distance in (0, 5, 50):
        for amount in (None, 0, 10, 1000):
            assert resolve(schedule, distance, amount) >= 0


def test_gaps_tolerated_only_when_allowed():
    tiers = [
        DistanceFeeTier(min_distance=0, max_distance=10, fee=50),
        DistanceFeeTier(min_distance=20, max_distance=30, fee=120),
    ]

    validate_tiers(tiers, allow_gaps=True)
    with pytest.raises(FeeScheduleError, match="Gap"):
        validate_tiers(tiers)
    assert schedule_gaps(tiers) == [(10, 20)]


def test_overlap_rejected_even_when_gaps_allowed():
    tiers = [
        DistanceFeeTier(min_distance=0, max_distance=10, fee=50),
        DistanceFeeTier(min_distance=5, max_distance=30, fee=120),
    ]

    with pytest.raises(FeeScheduleError, match="overlap"):
        validate_tiers(tiers, allow_gaps=True)


def test_tier_from_model_uses_base_fee_when_fee_missing():
    from src.app.schemas.delivery_fee import DeliveryFeeConfigModel

    tier = tier_from_model(DeliveryFeeConfigModel(id="x", min_distance=0, max_distance=5, base_fee=30))

    assert (tier.fee, tier.base_fee, tier.config_id) == (30, 30, "x")
