"""Position sources feeding the rider location reporter."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from ...config import settings
from ...models.domain import Position
from ..geospatial import haversine_m

logger = logging.getLogger(__name__)

PositionCallback = Callable[[Position], None]


@dataclass(frozen=True, slots=True)
class WatchOptions:
    min_interval_seconds: float = 10.0
    min_distance_meters: float = 10.0

    @classmethod
    def from_settings(cls) -> "WatchOptions":
        return cls(
            min_interval_seconds=settings.location_min_interval_seconds,
            min_distance_meters=settings.location_min_distance_meters,
        )


class Subscription(Protocol):
    def remove(self) -> None:
        ...


class PositionSource(Protocol):
    def request_permission(self) -> bool:
        ...

    def current_position(self) -> Position:
        ...

    def watch(self, callback: PositionCallback, options: WatchOptions) -> Subscription:
        ...


class PositionGate:
    """Passes a sample once both the minimum interval and minimum distance are exceeded."""

    def __init__(self, options: WatchOptions, last: Optional[Position] = None) -> None:
        self.options = options
        self.last = last

    def accept(self, position: Position) -> bool:
        if self.last is None:
            self.last = position
            return True
        elapsed = position.timestamp - self.last.timestamp
        moved = haversine_m(self.last.latitude, self.last.longitude, position.latitude, position.longitude)
        if elapsed < self.options.min_interval_seconds or moved < self.options.min_distance_meters:
            return False
        self.last = position
        return True


class _PollingSubscription:
    def __init__(self, stop: threading.Event, thread: threading.Thread, join_timeout: float) -> None:
        self._stop = stop
        self._thread = thread
        self._join_timeout = join_timeout

    def remove(self) -> None:
        self._stop.set()
        if self._thread is threading.current_thread():
            return
        self._thread.join(self._join_timeout)
        if self._thread.is_alive():
            logger.warning(f"Position poller still busy after {self._join_timeout}s; it will exit after the current read")


class PollingPositionSource:
    """Polls a position reader on a background thread.

    ``reader`` returns ``(latitude, longitude)``; ``permission`` reports whether
    location access is granted (defaults to always granted).
    """

    def __init__(
        self,
        reader: Callable[[], tuple[float, float]],
        *,
        permission: Callable[[], bool] | None = None,
        poll_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
        join_timeout: float = 5.0,
    ) -> None:
        self.reader = reader
        self.permission = permission
        self.poll_seconds = poll_seconds if poll_seconds is not None else settings.location_poll_seconds
        self.clock = clock
        self.join_timeout = join_timeout

    def request_permission(self) -> bool:
        return True if self.permission is None else bool(self.permission())

    def current_position(self) -> Position:
        latitude, longitude = self.reader()
        return Position(latitude=latitude, longitude=longitude, timestamp=self.clock())

    def watch(self, callback: PositionCallback, options: WatchOptions) -> _PollingSubscription:
        stop = threading.Event()
        gate = PositionGate(options, last=self.current_position())

        def _poll() -> None:
            while not stop.wait(self.poll_seconds):
                try:
                    position = self.current_position()
                except Exception as exc:
                    logger.warning(f"Failed to read position: {exc}")
                    continue
                if stop.is_set():
                    break
                if gate.accept(position):
                    callback(position)

        thread = threading.Thread(target=_poll, name="position-poller", daemon=True)
        thread.start()
        return _PollingSubscription(stop, thread, self.join_timeout)
