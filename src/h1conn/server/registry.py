"""Live-connection registry and server counters."""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

import anyio

if TYPE_CHECKING:
    from .connection import Connection


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MetricSample:
    """One polled metric value, e.g. ("http-0", "connections", "derive", 12)."""
    name: str
    instance: str
    kind: Literal["derive", "gauge"]
    value: int


@dataclass(frozen=True, slots=True)
class ServerStats:
    """Read-only snapshot of the server counters."""
    total_connections: int = 0
    current_connections: int = 0
    requests_served: int = 0
    read_errors: int = 0
    respond_errors: int = 0

    def metrics(self, name: str) -> list[MetricSample]:
        return [
            MetricSample(name, "connections", "derive", self.total_connections),
            MetricSample(name, "current_connections", "gauge", self.current_connections),
            MetricSample(name, "http_requests", "derive", self.requests_served),
            MetricSample(name, "read_errors", "derive", self.read_errors),
            MetricSample(name, "respond_errors", "derive", self.respond_errors),
        ]


class ConnectionRegistry:
    """
    Tracks live connections and aggregate counters.

    `register()` hands out an integer handle; `unregister()` takes it back.
    The current-connections counter is the size of the live set, so it can
    never drift from it. Counter updates take a lock so connections may be
    driven from more than one thread.
    """

    def __init__(self):
        self._connections: dict[int, Connection] = {}
        self._handles = itertools.count()
        self._lock = threading.Lock()
        self._total_connections = 0
        self._requests_served = 0
        self._read_errors = 0
        self._respond_errors = 0
        self._stopping = False
        self._all_stopped: anyio.Event | None = None

    def register(self, connection: Connection) -> int:
        with self._lock:
            handle = next(self._handles)
            self._connections[handle] = connection
            self._total_connections += 1
        return handle

    def unregister(self, handle: int) -> bool:
        """
        Remove a connection and run the idle check.

        Returns False if the handle was not live (already unregistered).
        """
        with self._lock:
            removed = self._connections.pop(handle, None) is not None
        if removed:
            self.maybe_idle()
        return removed

    def connections(self) -> list[Connection]:
        with self._lock:
            return list(self._connections.values())

    @property
    def current_connections(self) -> int:
        return len(self._connections)

    def request_served(self) -> None:
        with self._lock:
            self._requests_served += 1

    def read_error(self) -> None:
        with self._lock:
            self._read_errors += 1

    def respond_error(self) -> None:
        with self._lock:
            self._respond_errors += 1

    def counts(self) -> ServerStats:
        with self._lock:
            return ServerStats(
                total_connections=self._total_connections,
                current_connections=len(self._connections),
                requests_served=self._requests_served,
                read_errors=self._read_errors,
                respond_errors=self._respond_errors,
            )

    @property
    def stopping(self) -> bool:
        return self._stopping

    def begin_stop(self) -> None:
        self._stopping = True
        self.maybe_idle()

    def maybe_idle(self) -> None:
        if self._stopping and not self._connections:
            logger.debug("all connections stopped")
            if self._all_stopped is not None:
                self._all_stopped.set()

    async def wait_idle(self) -> None:
        """Wait until stop was requested and no connection is live."""
        if self._stopping and not self._connections:
            return
        if self._all_stopped is None:
            self._all_stopped = anyio.Event()
        await self._all_stopped.wait()
