"""Order placement decision: is the merchant open, and what does delivery cost."""

from __future__ import annotations

import logging
from datetime import datetime

from ...models.domain import FeeOverridePolicy, FeeSchedule, TripRoute
from ...schemas.orders import OrderQuoteRequest, OrderQuoteResponse
from ..availability import evaluate_availability
from ..fees import resolve_fee
from ..routing import OSRMClient, trip_route

logger = logging.getLogger(__name__)

MERCHANT_CLOSED_REASON = "Merchant is not available"


def route_for_request(request: OrderQuoteRequest, client: OSRMClient | None = None) -> TripRoute:
    """Use the caller's distance when given, otherwise route merchant to customer."""

    if request.distance_km is not None:
        return TripRoute(distance_km=request.distance_km, source="provided")
    return trip_route(
        (request.merchant_lat, request.merchant_lng),
        (request.customer_lat, request.customer_lng),
        client=client,
    )


def quote_order(
    request: OrderQuoteRequest,
    *,
    fee_schedule: FeeSchedule,
    policy: FeeOverridePolicy | str | None = None,
    now: datetime | None = None,
    routing_client: OSRMClient | None = None,
) -> OrderQuoteResponse:
    availability = evaluate_availability(
        request.operating_hours,
        now or request.at,
        default_open=request.merchant_is_open,
    )
    if not availability.is_open:
        logger.info(f"Rejecting order for merchant {request.merchant_id}: closed ({availability.next_open_hint})")
        return OrderQuoteResponse(
            merchant_id=request.merchant_id,
            accepted=False,
            reason=MERCHANT_CLOSED_REASON,
            next_open=availability.next_open_hint,
            subtotal=request.subtotal,
        )

    route = route_for_request(request, client=routing_client)
    fee = resolve_fee(fee_schedule, route.distance_km, request.subtotal, policy=policy)
    return OrderQuoteResponse(
        merchant_id=request.merchant_id,
        accepted=True,
        distance_km=round(route.distance_km, 3),
        duration_seconds=route.duration_seconds,
        delivery_fee=fee,
        subtotal=request.subtotal,
        total=request.subtotal + fee,
    )
