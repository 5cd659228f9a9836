"""Buffered reader and writer over an AnyIO byte stream."""

from __future__ import annotations

import logging

import anyio
from anyio.abc import ByteReceiveStream, ByteStream

from .request import HttpRequest, RequestParser


logger = logging.getLogger(__name__)


class StreamReader:
    """
    Feeds bytes from the stream into a parser, one request per `consume()`.

    Bytes received past the end of a request stay buffered here and are fed
    to the parser first on the next call, so pipelined requests survive the
    parser reset between requests.
    """

    def __init__(self, stream: ByteReceiveStream, receive_size: int = 4096):
        self._stream = stream
        self._receive_size = receive_size
        self._pending = b""
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def consume(self, parser: RequestParser) -> HttpRequest | None:
        """Return the next request, or None on a clean end of stream."""
        if self._closed:
            raise anyio.ClosedResourceError
        while True:
            if self._pending:
                data, self._pending = self._pending, b""
                leftover = parser.feed(data)
                if parser.complete:
                    self._pending = leftover
                    return parser.get_parsed_request()
            try:
                self._pending = await self._stream.receive(self._receive_size)
            except anyio.EndOfStream:
                parser.feed_eof()
                return None

    def close(self) -> None:
        # The socket is shared with the writer; it is released by the connection.
        self._closed = True
        self._pending = b""


class StreamWriter:
    """Accumulates writes and sends them to the stream on `flush()`."""

    def __init__(self, stream: ByteStream):
        self._stream = stream
        self._buffer = bytearray()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> None:
        if self._closed:
            raise anyio.ClosedResourceError
        self._buffer.extend(data)

    async def flush(self) -> None:
        if self._closed:
            raise anyio.ClosedResourceError
        if not self._buffer:
            return
        data = bytes(self._buffer)
        self._buffer.clear()
        await self._stream.send(data)

    async def close(self) -> None:
        """Half-close the write side. Failures are logged, never raised."""
        if self._closed:
            return
        self._closed = True
        self._buffer.clear()
        try:
            await self._stream.send_eof()
        except Exception:
            # TLSStream.send_eof always raises NotImplementedError.
            logger.debug("send_eof failed", exc_info=True)
