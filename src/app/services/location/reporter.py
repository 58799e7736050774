"""Rider live-location reporting while the rider is online."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Optional, Protocol

from ...config import settings
from ...models.domain import Position, ReporterState
from .sources import PositionSource, Subscription, WatchOptions

logger = logging.getLogger(__name__)

PERMISSION_DENIED_MESSAGE = "Permission to access location was denied"


class LocationReportClient(Protocol):
    def report(self, latitude: float, longitude: float) -> None:
        ...


class LocationReporter:
    """Samples a position source and forwards every update to the report client.

    Each online session acquires one current position, reports it, then
    subscribes to gated updates. Reports run on a thread pool so a slow call
    never holds up sampling; failures are logged and dropped. Going offline
    removes the subscription, and callbacks from an ended session are ignored.
    """

    def __init__(
        self,
        source: PositionSource,
        client: LocationReportClient,
        *,
        options: WatchOptions | None = None,
        executor: Executor | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.source = source
        self.client = client
        self.options = options or WatchOptions.from_settings()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers or settings.location_report_workers,
            thread_name_prefix="location-report",
        )
        self._lock = threading.RLock()
        self._session = 0
        self._subscription: Optional[Subscription] = None
        self.state = ReporterState.OFFLINE
        self.error: Optional[str] = None
        self.last_position: Optional[Position] = None

    @property
    def is_online(self) -> bool:
        return self.state is ReporterState.ONLINE

    def set_online(self, online: bool) -> ReporterState:
        return self.go_online() if online else self.go_offline()

    def go_online(self) -> ReporterState:
        with self._lock:
            if self.state is ReporterState.ONLINE:
                return self.state
            self._session += 1
            session = self._session
            self.error = None

            if not self.source.request_permission():
                self._fail(PERMISSION_DENIED_MESSAGE)
                return self.state

            try:
                current = self.source.current_position()
            except Exception as exc:
                self._fail(f"Unable to get current position: {exc}")
                return self.state

            self.state = ReporterState.ONLINE
            self._on_position(session, current)

            try:
                self._subscription = self.source.watch(
                    lambda position: self._on_position(session, position),
                    self.options,
                )
            except Exception as exc:
                self._fail(f"Unable to watch position: {exc}")
            return self.state

    def go_offline(self) -> ReporterState:
        with self._lock:
            self._session += 1
            subscription, self._subscription = self._subscription, None
            self.state = ReporterState.OFFLINE
            self.error = None
        # Outside the lock: a source may deliver one last callback while stopping.
        if subscription is not None:
            subscription.remove()
        return ReporterState.OFFLINE

    def close(self) -> None:
        self.go_offline()
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    def _fail(self, message: str) -> None:
        logger.warning(f"Location reporting stopped: {message}")
        self.state = ReporterState.ERROR
        self.error = message

    def _on_position(self, session: int, position: Position) -> None:
        with self._lock:
            if session != self._session or self.state is not ReporterState.ONLINE:
                return
            self.last_position = position
            self._executor.submit(self._send, position)

    def _send(self, position: Position) -> None:
        try:
            self.client.report(position.latitude, position.longitude)
        except Exception as exc:
            logger.warning(f"Failed to report rider location: {exc}")
