"""Merchant availability endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...schemas.availability import AvailabilityRequest, AvailabilityResponse
from ...services.availability import evaluate_availability

router = APIRouter(prefix="/availability", tags=["availability"])


@router.post("/evaluate", response_model=AvailabilityResponse, status_code=status.HTTP_200_OK)
def evaluate_merchant_availability(payload: AvailabilityRequest) -> AvailabilityResponse:
    """Evaluate operating hours; unreadable hours fall back to the manual open flag."""
    result = evaluate_availability(payload.operating_hours, payload.at, default_open=payload.is_open)
    return AvailabilityResponse(is_open=result.is_open, next_open=result.next_open_hint)
