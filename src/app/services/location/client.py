"""HTTP client that forwards rider positions to the platform API."""

from __future__ import annotations

import logging

import httpx

from ...config import settings

logger = logging.getLogger(__name__)

LOCATION_PATH = "/riders/location"


class RiderLocationClient:
    """Sends ``PATCH /riders/location`` with the rider's latest coordinates.

    Only success or failure is consumed; the response body is ignored.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.rider_api_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("Rider API base URL is not configured.")
        self.token = token if token is not None else settings.rider_api_token
        self.timeout = timeout if timeout is not None else settings.location_report_timeout_seconds
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        self._client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            transport=transport,
        )

    def report(self, latitude: float, longitude: float) -> None:
        response = self._client.patch(LOCATION_PATH, json={"lat": latitude, "lng": longitude})
        response.raise_for_status()
        logger.debug(f"Reported rider location ({latitude:.6f}, {longitude:.6f})")

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RiderLocationClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
