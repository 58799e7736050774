"""Order quote endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...data.fee_repository import load_fee_schedule
from ...schemas.orders import OrderQuoteRequest, OrderQuoteResponse
from ...services.orders import quote_order

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/quote", response_model=OrderQuoteResponse, status_code=status.HTTP_200_OK)
def quote(payload: OrderQuoteRequest) -> OrderQuoteResponse:
    try:
        return quote_order(payload, fee_schedule=load_fee_schedule())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error quoting order: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to quote order: {str(exc)}"
        ) from exc
