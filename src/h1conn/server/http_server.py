"""HTTP server: accepts sockets and hands each one to a `Connection`.

- Binds a TCP listener with AnyIO and serves connections in the caller's TaskGroup
- Keeps the shared `Date` header value fresh with a background task
- `stop()` stops accepting, shuts live connections down and waits for them
"""

from __future__ import annotations

import itertools
import logging
from email.utils import formatdate
from typing import Any

import anyio
from anyio.abc import ByteStream, SocketAttribute, TaskGroup

from ..config import ServerConfig
from ..http.routes import Routes
from .connection import Connection
from .registry import ConnectionRegistry, MetricSample, ServerStats


logger = logging.getLogger(__name__)

_server_ids = itertools.count()


def generate_server_name() -> str:
    return f"http-{next(_server_ids)}"


def http_date() -> str:
    return formatdate(usegmt=True)


class HttpServer:
    """
    Owns the routing table, the connection registry and the listener.

    `on_accept()` is the whole surface the accept layer needs: it returns a
    registered `Connection` that the caller drives with `process()`.
    """

    def __init__(
        self,
        routes: Routes | None = None,
        config: ServerConfig | None = None,
        *,
        name: str | None = None,
    ):
        self.config = config or ServerConfig()
        self.config.validate()
        self.routes = routes or Routes()
        self.name = name or generate_server_name()
        self.registry = ConnectionRegistry()
        self._date = http_date()
        # anyio.create_tcp_listener() may return a MultiListener; keep it loosely typed.
        self._listener: Any = None
        self._scope: anyio.CancelScope | None = None
        self._port: int | None = None

    @property
    def date(self) -> str:
        return self._date

    def update_date(self) -> None:
        self._date = http_date()

    @property
    def port(self) -> int:
        """Port actually bound, once started."""
        if self._port is None:
            raise RuntimeError("server not started")
        return self._port

    def on_accept(self, stream: ByteStream) -> Connection:
        return Connection(stream, self)

    def counts(self) -> ServerStats:
        return self.registry.counts()

    def metrics(self) -> list[MetricSample]:
        return self.counts().metrics(self.name)

    async def start(self, task_group: TaskGroup) -> None:
        """Bind the listener and serve in `task_group` until `stop()`."""
        if self._listener is not None:
            raise RuntimeError(f"{self.name} already started")
        self._listener = await anyio.create_tcp_listener(
            local_host=self.config.host, local_port=self.config.port
        )
        self._port = self._listener.extra(SocketAttribute.local_port)
        self._scope = anyio.CancelScope()
        task_group.start_soon(self._serve, task_group)
        logger.info("%s listening on %s:%d", self.name, self.config.host, self._port)

    async def _serve(self, task_group: TaskGroup) -> None:
        assert self._listener is not None
        assert self._scope is not None
        with self._scope:
            async with anyio.create_task_group() as tg:
                tg.start_soon(self._refresh_date)
                async with self._listener:
                    # Connections run in the caller's group so stop() can drain them.
                    await self._listener.serve(self._handle_client, task_group=task_group)

    async def _refresh_date(self) -> None:
        while True:
            await anyio.sleep(self.config.date_refresh_interval)
            self.update_date()

    async def _handle_client(self, stream: ByteStream) -> None:
        if self.registry.stopping:
            await stream.aclose()
            return
        await self.on_accept(stream).process()

    async def stop(self) -> None:
        """Stop accepting, shut down live connections and wait until none remain."""
        logger.info("%s stopping with %d live connections", self.name, self.registry.current_connections)
        self.registry.begin_stop()
        if self._scope is not None:
            self._scope.cancel()
        for conn in self.registry.connections():
            conn.shutdown()
        await self.registry.wait_idle()
        logger.info("%s stopped", self.name)
