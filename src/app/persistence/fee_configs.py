"""Database persistence for delivery fee configurations."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..db.supabase import get_supabase_client
from ..schemas.delivery_fee import DeliveryFeeConfigModel, DeliveryFeeConfigUpdate, OrderAmountTierModel

CONFIGS_TABLE = "delivery_fee_configs"
TIERS_TABLE = "delivery_fee_tiers"

logger = logging.getLogger(__name__)


class DatabaseNotConfiguredError(RuntimeError):
    """Raised when a write is attempted without Supabase credentials."""


def _require_client(client: Any | None) -> Any:
    client = client if client is not None else get_supabase_client()
    if client is None:
        raise DatabaseNotConfiguredError(
            "Supabase not configured. Set OPS_SUPABASE_URL and OPS_SUPABASE_KEY environment variables."
        )
    return client


def _row_to_model(row: dict[str, Any]) -> DeliveryFeeConfigModel:
    tiers = sorted(row.get(TIERS_TABLE) or [], key=lambda tier: float(tier["min_order_amount"]))
    return DeliveryFeeConfigModel(
        id=str(row["id"]) if row.get("id") is not None else None,
        min_distance=float(row["min_distance"]),
        max_distance=float(row["max_distance"]),
        fee=row.get("fee"),
        base_fee=row.get("base_fee"),
        tiers=[
            OrderAmountTierModel(
                min_order_amount=float(tier["min_order_amount"]),
                max_order_amount=tier.get("max_order_amount"),
                fee=float(tier["fee"]),
            )
            for tier in tiers
        ],
    )


def _tier_rows(config_id: str, tiers: list[OrderAmountTierModel]) -> list[dict[str, Any]]:
    return [
        {
            "config_id": config_id,
            "min_order_amount": tier.min_order_amount,
            "max_order_amount": tier.max_order_amount,
            "fee": tier.fee,
        }
        for tier in tiers
    ]


def list_fee_configs(client: Any | None = None) -> Optional[list[DeliveryFeeConfigModel]]:
    """Load fee configs ordered by distance. Returns None if the database is unavailable."""

    client = client if client is not None else get_supabase_client()
    if client is None:
        return None

    try:
        response = (
            client.table(CONFIGS_TABLE)
            .select(f"*, {TIERS_TABLE}(*)")
            .order("min_distance")
            .execute()
        )
    except Exception as e:
        logger.warning(f"Failed to load delivery fee configs from database: {e}")
        return None

    configs: list[DeliveryFeeConfigModel] = []
    for row in response.data or []:
        try:
            configs.append(_row_to_model(row))
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Skipping invalid delivery fee config row: {e}")
    return configs


def create_fee_config(config: DeliveryFeeConfigModel, client: Any | None = None) -> DeliveryFeeConfigModel:
    client = _require_client(client)
    response = (
        client.table(CONFIGS_TABLE)
        .insert(
            {
                "min_distance": config.min_distance,
                "max_distance": config.max_distance,
                "fee": config.fee,
                "base_fee": config.base_fee,
            }
        )
        .execute()
    )
    row = response.data[0]
    if config.tiers:
        client.table(TIERS_TABLE).insert(_tier_rows(str(row["id"]), config.tiers)).execute()
    logger.info(f"Created delivery fee config {row['id']} [{config.min_distance}, {config.max_distance})")
    return config.model_copy(update={"id": str(row["id"])})


def update_fee_config(
    config_id: str, update: DeliveryFeeConfigUpdate, client: Any | None = None
) -> Optional[DeliveryFeeConfigModel]:
    """Apply a partial update. Supplied tiers replace the stored ones."""

    client = _require_client(client)
    existing = client.table(CONFIGS_TABLE).select("id").eq("id", config_id).execute()
    if not existing.data:
        return None

    fields = update.model_dump(exclude_unset=True, exclude={"tiers"})
    if fields:
        client.table(CONFIGS_TABLE).update(fields).eq("id", config_id).execute()

    if update.tiers is not None:
        client.table(TIERS_TABLE).delete().eq("config_id", config_id).execute()
        if update.tiers:
            client.table(TIERS_TABLE).insert(_tier_rows(config_id, update.tiers)).execute()

    response = (
        client.table(CONFIGS_TABLE)
        .select(f"*, {TIERS_TABLE}(*)")
        .eq("id", config_id)
        .execute()
    )
    if not response.data:
        return None
    return _row_to_model(response.data[0])


def delete_fee_config(config_id: str, client: Any | None = None) -> bool:
    client = _require_client(client)
    client.table(TIERS_TABLE).delete().eq("config_id", config_id).execute()
    response = client.table(CONFIGS_TABLE).delete().eq("id", config_id).execute()
    return bool(response.data)


def replace_fee_configs(configs: list[DeliveryFeeConfigModel], client: Any | None = None) -> int:
    """Clear all stored configs and insert ``configs``. Returns the number inserted."""

    client = _require_client(client)
    for existing in list_fee_configs(client) or []:
        if existing.id is not None:
            delete_fee_config(existing.id, client=client)
    for config in configs:
        create_fee_config(config, client=client)
    return len(configs)
