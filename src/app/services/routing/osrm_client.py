"""HTTP client for OSRM driving routes."""

from __future__ import annotations

import logging
import time

import httpx

from ...config import settings
from ...models.domain import TripRoute

logger = logging.getLogger(__name__)


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.osrm_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.osrm_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.osrm_backoff_seconds
        self._client = httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            transport=transport,
        )

    def route(
        self,
        origin: tuple[float, float],
        destination: tuple[float, float],
    ) -> TripRoute:
        """Driving distance and duration between two ``(lat, lng)`` points."""

        coordinate_str = ";".join(f"{lng},{lat}" for lat, lng in (origin, destination))
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"
        params = {"overview": "false", "steps": "false"}

        attempt = 0
        while True:
            try:
                response = self._client.get(url, params=params)
                response.raise_for_status()
                data = response.json()
                if data.get("code") != "Ok" or not data.get("routes"):
                    raise ValueError(f"OSRM returned no route: {data.get('code')}")
                route = data["routes"][0]
                return TripRoute(
                    distance_km=float(route["distance"]) / 1000.0,
                    duration_seconds=float(route["duration"]),
                    source="osrm",
                )
            except (httpx.TimeoutException, httpx.NetworkError) as e:
                attempt += 1
                if attempt > self.max_retries:
                    raise ConnectionError(f"Failed to reach OSRM service at {self.base_url}: {e}") from e
                wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                logger.debug(f"OSRM request failed, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                time.sleep(wait_time)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "OSRMClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
