"""Delivery fee estimate and configuration endpoints."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import ValidationError

from ...config import settings
from ...data.fee_repository import load_fee_schedule
from ...models.domain import FeeSchedule, TripRoute
from ...persistence.fee_configs import (
    DatabaseNotConfiguredError,
    create_fee_config,
    delete_fee_config,
    list_fee_configs,
    update_fee_config,
)
from ...schemas.delivery_fee import (
    DeliveryFeeConfigModel,
    DeliveryFeeConfigUpdate,
    FeeEstimateRequest,
    FeeEstimateResponse,
    OrderAmountTierModel,
)
from ...services.fees import FeeScheduleError, resolve_fee, schedule_gaps, tier_from_model, validate_tiers
from ...services.routing import trip_route

router = APIRouter(prefix="/delivery-fee", tags=["delivery-fee"])

SCHEDULE_WARNING_HEADER = "X-Fee-Schedule-Warning"


def _schedule_to_models(schedule: FeeSchedule) -> List[DeliveryFeeConfigModel]:
    return [
        DeliveryFeeConfigModel(
            id=tier.config_id,
            min_distance=tier.min_distance,
            max_distance=tier.max_distance,
            fee=tier.fee,
            base_fee=tier.base_fee,
            tiers=[
                OrderAmountTierModel(
                    min_order_amount=order_tier.min_order_amount,
                    max_order_amount=order_tier.max_order_amount,
                    fee=order_tier.fee,
                )
                for order_tier in tier.order_tiers
            ],
        )
        for tier in schedule.tiers
    ]


def _stored_configs() -> List[DeliveryFeeConfigModel]:
    configs = list_fee_configs()
    if configs is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Delivery fee configs could not be read from the database",
        )
    return configs


def _check_resulting_set(configs: List[DeliveryFeeConfigModel], response: Response) -> None:
    """Reject a write that would leave overlapping bands; report uncovered ranges in a header."""

    tiers = sorted((tier_from_model(config) for config in configs), key=lambda tier: tier.min_distance)
    try:
        validate_tiers(tiers, allow_gaps=True)
    except FeeScheduleError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    gaps = schedule_gaps(tiers)
    if gaps:
        message = "; ".join(f"no band covers {start} km to {end} km" for start, end in gaps)
        logging.warning(f"Delivery fee configs are incomplete, pricing uses fallback tiers: {message}")
        response.headers[SCHEDULE_WARNING_HEADER] = message


@router.post("/estimate", response_model=FeeEstimateResponse, status_code=status.HTTP_200_OK)
def estimate_fee(payload: FeeEstimateRequest) -> FeeEstimateResponse:
    if payload.distance_km is not None:
        route = TripRoute(distance_km=payload.distance_km, source="provided")
    else:
        route = trip_route((payload.origin_lat, payload.origin_lng), (payload.dest_lat, payload.dest_lng))

    fee = resolve_fee(load_fee_schedule(), route.distance_km, payload.subtotal)
    return FeeEstimateResponse(
        fee=fee,
        distance_km=round(route.distance_km, 3),
        duration_seconds=route.duration_seconds,
        distance_source=route.source,
        policy=settings.fee_override_policy,
    )


@router.get("", response_model=List[DeliveryFeeConfigModel], status_code=status.HTTP_200_OK)
def list_configs() -> List[DeliveryFeeConfigModel]:
    """Stored bands as admins saved them; the active fallback tiers when the database is unavailable."""

    configs = list_fee_configs()
    if configs is None:
        return _schedule_to_models(load_fee_schedule())
    return configs


@router.post("", response_model=DeliveryFeeConfigModel, status_code=status.HTTP_201_CREATED)
def create_config(payload: DeliveryFeeConfigModel, response: Response) -> DeliveryFeeConfigModel:
    try:
        _check_resulting_set([*_stored_configs(), payload], response)
        return create_fee_config(payload)
    except HTTPException:
        raise
    except DatabaseNotConfiguredError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error creating delivery fee config: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create delivery fee config: {str(exc)}"
        ) from exc


@router.put("/{config_id}", response_model=DeliveryFeeConfigModel, status_code=status.HTTP_200_OK)
def update_config(config_id: str, payload: DeliveryFeeConfigUpdate, response: Response) -> DeliveryFeeConfigModel:
    try:
        stored = _stored_configs()
        current = next((config for config in stored if config.id == config_id), None)
        if current is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Delivery fee config {config_id} not found"
            )
        try:
            merged = DeliveryFeeConfigModel.model_validate(
                {**current.model_dump(), **payload.model_dump(exclude_unset=True)}
            )
        except ValidationError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        _check_resulting_set([merged if config.id == config_id else config for config in stored], response)
        updated = update_fee_config(config_id, payload)
    except HTTPException:
        raise
    except DatabaseNotConfiguredError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error updating delivery fee config {config_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update delivery fee config: {str(exc)}"
        ) from exc
    if updated is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Delivery fee config {config_id} not found"
        )
    return updated


@router.delete("/{config_id}", status_code=status.HTTP_200_OK)
def delete_config(config_id: str) -> dict:
    try:
        deleted = delete_fee_config(config_id)
    except DatabaseNotConfiguredError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error deleting delivery fee config {config_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete delivery fee config: {str(exc)}"
        ) from exc
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Delivery fee config {config_id} not found"
        )
    return {"success": True, "message": f"Delivery fee config {config_id} deleted"}
