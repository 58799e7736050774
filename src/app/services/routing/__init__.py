"""Trip routing for delivery distance and duration."""

from .osrm_client import OSRMClient
from .service import straight_line_route, trip_route

__all__ = ["OSRMClient", "straight_line_route", "trip_route"]
