"""Order quote request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, model_validator


class OrderQuoteRequest(BaseModel):
    merchant_id: Optional[str] = Field(default=None, description="Merchant identifier, echoed back.")
    operating_hours: Optional[Union[dict[str, Any], str]] = Field(
        default=None, description="Merchant weekly schedule, as an object or JSON string."
    )
    merchant_is_open: Optional[bool] = Field(
        default=None, description="Manual open flag used when operating hours are missing or unreadable."
    )
    subtotal: float = Field(..., ge=0, description="Cart total.")
    distance_km: Optional[float] = Field(default=None, ge=0)
    merchant_lat: Optional[float] = Field(default=None, ge=-90, le=90)
    merchant_lng: Optional[float] = Field(default=None, ge=-180, le=180)
    customer_lat: Optional[float] = Field(default=None, ge=-90, le=90)
    customer_lng: Optional[float] = Field(default=None, ge=-180, le=180)
    at: Optional[datetime] = Field(default=None, description="Evaluation time; defaults to now.")

    @model_validator(mode="after")
    def _require_distance_or_coordinates(self) -> "OrderQuoteRequest":
        coordinates = (self.merchant_lat, self.merchant_lng, self.customer_lat, self.customer_lng)
        if self.distance_km is None and any(value is None for value in coordinates):
            raise ValueError("Provide distance_km or merchant and customer coordinates")
        return self


class OrderQuoteResponse(BaseModel):
    merchant_id: Optional[str] = None
    accepted: bool
    reason: Optional[str] = None
    next_open: Optional[str] = None
    distance_km: Optional[float] = None
    duration_seconds: Optional[float] = None
    delivery_fee: Optional[float] = None
    subtotal: float
    total: Optional[float] = None
