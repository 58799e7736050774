"""Trip distance for delivery pricing: road route when available, straight line otherwise."""

from __future__ import annotations

import logging

import httpx

from ...config import settings
from ...models.domain import TripRoute
from ..geospatial import haversine_km
from .osrm_client import OSRMClient

logger = logging.getLogger(__name__)


def straight_line_route(origin: tuple[float, float], destination: tuple[float, float]) -> TripRoute:
    return TripRoute(distance_km=haversine_km(*origin, *destination))


def trip_route(
    origin: tuple[float, float],
    destination: tuple[float, float],
    client: OSRMClient | None = None,
) -> TripRoute:
    """Route between two ``(lat, lng)`` points.

    Uses OSRM when a client is given or ``osrm_base_url`` is configured. Any
    routing failure degrades to the haversine distance with no duration.
    """

    if client is None and not settings.osrm_base_url:
        return straight_line_route(origin, destination)

    owns_client = client is None
    try:
        if client is None:
            client = OSRMClient()
        return client.route(origin, destination)
    except (httpx.HTTPError, ConnectionError, ValueError, KeyError, TypeError) as e:
        logger.warning(f"Road routing failed, using straight-line distance: {e}")
        return straight_line_route(origin, destination)
    finally:
        if owns_client and client is not None:
            client.close()
