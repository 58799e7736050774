"""Order placement decisions."""

from .quote import MERCHANT_CLOSED_REASON, quote_order, route_for_request

__all__ = ["MERCHANT_CLOSED_REASON", "quote_order", "route_for_request"]
