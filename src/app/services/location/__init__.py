"""Rider live-location sampling and reporting."""

from .client import RiderLocationClient
from .reporter import PERMISSION_DENIED_MESSAGE, LocationReportClient, LocationReporter
from .sources import PollingPositionSource, PositionGate, PositionSource, WatchOptions

__all__ = [
    "LocationReportClient",
    "LocationReporter",
    "PERMISSION_DENIED_MESSAGE",
    "PollingPositionSource",
    "PositionGate",
    "PositionSource",
    "RiderLocationClient",
    "WatchOptions",
]
