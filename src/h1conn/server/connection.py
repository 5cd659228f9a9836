"""One accepted TCP connection: a read loop and a respond loop joined by a reply channel.

The read loop parses requests, dispatches them and queues the finished
responses; the respond loop writes them back in the same order. The channel
capacity bounds how far the reader may get ahead of the writer.

Neither loop lets an exception escape. A read failure is counted and treated
as end of stream; a respond failure is counted and ends the respond loop.
Either way the other loop is allowed to finish and the connection is torn down
normally, so one bad client cannot disturb the rest of the server.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import anyio
from anyio.abc import ByteStream

from ..http.request import RequestParser
from ..http.response import HttpResponse
from ..http.streams import StreamReader, StreamWriter
from ..primitives.channel import ChannelClosed, ReplyChannel
from .dispatch import generate_reply

if TYPE_CHECKING:
    from .http_server import HttpServer


logger = logging.getLogger(__name__)


class Connection:
    def __init__(self, stream: ByteStream, server: HttpServer):
        config = server.config
        self._stream = stream
        self._server = server
        self._reader = StreamReader(stream, config.receive_size)
        self._writer = StreamWriter(stream)
        self._parser = RequestParser(
            max_header_bytes=config.max_header_bytes,
            max_body_bytes=config.max_body_bytes,
        )
        # None is the end-of-replies marker.
        self._replies: ReplyChannel[HttpResponse | None] = ReplyChannel(
            config.reply_queue_capacity
        )
        self._resp: HttpResponse | None = None
        self._done = False
        self._started = False
        self._cancel_scope = anyio.CancelScope()
        self._handle = server.registry.register(self)

    @property
    def done(self) -> bool:
        """True once no more requests will be read."""
        return self._done

    @property
    def handle(self) -> int:
        return self._handle

    async def process(self) -> None:
        """Run both loops to completion, then release the socket and unregister."""
        if self._started:
            raise RuntimeError("connection already processed")
        self._started = True
        try:
            with self._cancel_scope:
                async with anyio.create_task_group() as tg:
                    tg.start_soon(self.read)
                    tg.start_soon(self.respond)
        finally:
            try:
                with anyio.CancelScope(shield=True):
                    await self._stream.aclose()
            except Exception:
                logger.debug("closing the stream failed", exc_info=True)
            finally:
                self._server.registry.unregister(self._handle)

    def shutdown(self) -> None:
        """Abort both loops; process() still cleans up."""
        self._cancel_scope.cancel()

    # --- read side ---

    async def read(self) -> None:
        try:
            try:
                while not self._done:
                    await self.read_one()
            except ChannelClosed:
                logger.debug("respond loop ended, no more requests will be read")
            except Exception:
                self._server.registry.read_error()
                logger.debug("read failed", exc_info=True)
            self._done = True
            try:
                await self._replies.push_eventually(None)
            except ChannelClosed:
                logger.debug("respond loop ended before the end-of-replies marker")
        finally:
            self._reader.close()

    async def read_one(self) -> None:
        self._parser.reset()
        req = await self._reader.consume(self._parser)
        if req is None:
            self._done = True
            return
        self._server.registry.request_served()

        await self._replies.not_full()
        resp, should_close = await generate_reply(
            req,
            self._server.routes,
            server_name=self._server.config.server_name,
            date=self._server.date,
        )
        if should_close:
            self._done = True
        # Room was reserved above and this loop is the only producer.
        self._replies.push(resp)

    # --- write side ---

    async def respond(self) -> None:
        try:
            await self.response_loop()
        except Exception:
            self._server.registry.respond_error()
            logger.debug("respond failed", exc_info=True)
        finally:
            self._replies.close()
            await self._writer.close()

    async def response_loop(self) -> None:
        while True:
            resp = await self._replies.pop_eventually()
            if resp is None:
                return
            self._resp = resp
            await self.start_response()
            self._resp = None

    async def start_response(self) -> None:
        resp = self._resp
        assert resp is not None
        self._writer.write(resp.response_line.encode("iso-8859-1"))
        for name, value in resp.headers.items():
            self._writer.write(f"{name}: {value}\r\n".encode("iso-8859-1"))
        self._writer.write(b"\r\n")
        self._writer.write(resp.body)
        await self._writer.flush()
