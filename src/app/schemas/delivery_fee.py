"""Delivery fee configuration request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class OrderAmountTierModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    min_order_amount: float = Field(..., ge=0, alias="minOrderAmount")
    max_order_amount: Optional[float] = Field(default=None, alias="maxOrderAmount")
    fee: float = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "OrderAmountTierModel":
        if self.max_order_amount is not None and self.max_order_amount <= self.min_order_amount:
            raise ValueError("maxOrderAmount must be greater than minOrderAmount")
        return self


class DeliveryFeeConfigModel(BaseModel):
    """One distance band as stored by admins: bounds, fee, optional base fee and order tiers."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    min_distance: float = Field(..., ge=0, alias="minDistance")
    max_distance: float = Field(..., gt=0, alias="maxDistance")
    fee: Optional[float] = Field(default=None, ge=0)
    base_fee: Optional[float] = Field(default=None, ge=0, alias="baseFee")
    tiers: List[OrderAmountTierModel] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_band(self) -> "DeliveryFeeConfigModel":
        if self.max_distance <= self.min_distance:
            raise ValueError("maxDistance must be greater than minDistance")
        if self.fee is None and self.base_fee is None:
            raise ValueError("Either fee or baseFee is required")
        return self


class DeliveryFeeConfigUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    min_distance: Optional[float] = Field(default=None, ge=0, alias="minDistance")
    max_distance: Optional[float] = Field(default=None, gt=0, alias="maxDistance")
    fee: Optional[float] = Field(default=None, ge=0)
    base_fee: Optional[float] = Field(default=None, ge=0, alias="baseFee")
    tiers: Optional[List[OrderAmountTierModel]] = None


class FeeEstimateRequest(BaseModel):
    distance_km: Optional[float] = Field(default=None, ge=0, description="Trip distance in kilometers.")
    origin_lat: Optional[float] = Field(default=None, ge=-90, le=90)
    origin_lng: Optional[float] = Field(default=None, ge=-180, le=180)
    dest_lat: Optional[float] = Field(default=None, ge=-90, le=90)
    dest_lng: Optional[float] = Field(default=None, ge=-180, le=180)
    subtotal: Optional[float] = Field(default=None, ge=0, description="Cart total used for order-amount tiers.")

    @model_validator(mode="after")
    def _require_distance_or_coordinates(self) -> "FeeEstimateRequest":
        coordinates = (self.origin_lat, self.origin_lng, self.dest_lat, self.dest_lng)
        if self.distance_km is None and any(value is None for value in coordinates):
            raise ValueError("Provide distance_km or all of origin_lat, origin_lng, dest_lat, dest_lng")
        return self


class FeeEstimateResponse(BaseModel):
    fee: float
    distance_km: float
    duration_seconds: Optional[float] = Field(default=None, description="Driving time; null for straight-line distance.")
    distance_source: str = "straight_line"
    policy: str
