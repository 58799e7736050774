"""Route group exports."""

from . import availability, delivery_fee, health, orders

__all__ = ["availability", "delivery_fee", "health", "orders"]
