"""HTTP/1.x request type and incremental request parser.

The parser understands just enough of the wire format for the connection
engine: a request line, header lines, and an optional Content-Length body.
Chunked transfer coding is not supported and is reported as a parse error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import parse_qsl


HeaderMap = dict[str, str]


class ParseError(ValueError):
    """Malformed or truncated request bytes."""
    pass


class RequestTooLarge(ParseError):
    """Request head or body exceeds the configured limits."""
    pass


@dataclass(frozen=True, slots=True)
class HttpRequest:
    method: str
    target: str
    version: str
    headers: HeaderMap
    body: bytes = b""
    path: str = ""
    query: str = ""
    query_parameters: dict[str, str] = field(default_factory=dict)

    def header(self, name: str, default: str | None = None) -> str | None:
        """Case-insensitive header lookup."""
        if name in self.headers:
            return self.headers[name]
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default


def split_target(target: str) -> tuple[str, str, dict[str, str]]:
    """Split a request target into (path, raw query, decoded parameters)."""
    path, _, query = target.partition("?")
    params = dict(parse_qsl(query, keep_blank_values=True)) if query else {}
    return path, query, params


def _parse_head(block: bytes) -> tuple[str, str, str, HeaderMap]:
    head = block.decode("iso-8859-1")
    lines = head.split("\r\n")
    if not lines or not lines[0]:
        raise ParseError("missing request line")

    parts = lines[0].split(" ")
    if len(parts) == 3:
        method, target, raw_version = parts
        if not raw_version.startswith("HTTP/") or len(raw_version) <= 5:
            raise ParseError(f"invalid protocol version: {raw_version!r}")
        version = raw_version[5:]
    elif len(parts) == 2:
        # HTTP/0.9 simple request
        method, target = parts
        version = "0.9"
    else:
        raise ParseError("invalid request line")
    if not method or not target:
        raise ParseError("invalid request line")

    headers: HeaderMap = {}
    for line in lines[1:]:
        if line == "":
            break
        if ":" not in line:
            continue
        k, v = line.split(":", 1)
        k = k.strip()
        v = v.strip()
        if k in headers:
            headers[k] = f"{headers[k]}, {v}"
        else:
            headers[k] = v
    return method, target, version, headers


class RequestParser:
    """
    Stateful parser for one request at a time.

    Call `reset()` before each request, then `feed()` bytes until `complete`
    is true, or `feed_eof()` when the stream ends. `feed()` returns any bytes
    past the end of the request (the start of a pipelined request), which the
    caller keeps for the next round.
    """

    def __init__(
        self,
        *,
        max_header_bytes: int = 64 * 1024,
        max_body_bytes: int = 1 * 1024 * 1024,
    ):
        self._max_header_bytes = max_header_bytes
        self._max_body_bytes = max_body_bytes
        self.reset()

    def reset(self) -> None:
        self._buffer = bytearray()
        self._head: tuple[str, str, str, HeaderMap] | None = None
        self._content_length = 0
        self._request: HttpRequest | None = None
        self._eof = False

    @property
    def complete(self) -> bool:
        return self._request is not None

    @property
    def eof(self) -> bool:
        """True when the stream ended cleanly before any request byte."""
        return self._eof

    def get_parsed_request(self) -> HttpRequest:
        if self._request is None:
            raise ParseError("no complete request parsed")
        return self._request

    def feed(self, data: bytes) -> bytes:
        if self._request is not None or self._eof:
            return data
        self._buffer.extend(data)

        if self._head is None:
            # Tolerate empty lines ahead of the request line (RFC 9112 2.2).
            while self._buffer.startswith(b"\r\n"):
                del self._buffer[:2]
            idx = self._buffer.find(b"\r\n\r\n")
            if idx == -1:
                if len(self._buffer) > self._max_header_bytes:
                    raise RequestTooLarge("request head too large")
                return b""
            if idx > self._max_header_bytes:
                raise RequestTooLarge("request head too large")
            self._head = _parse_head(bytes(self._buffer[:idx]))
            del self._buffer[: idx + 4]
            self._content_length = self._body_length(self._head[3])

        if len(self._buffer) < self._content_length:
            return b""

        method, target, version, headers = self._head
        body = bytes(self._buffer[: self._content_length])
        leftover = bytes(self._buffer[self._content_length :])
        self._buffer = bytearray()
        path, query, params = split_target(target)
        self._request = HttpRequest(
            method=method,
            target=target,
            version=version,
            headers=headers,
            body=body,
            path=path,
            query=query,
            query_parameters=params,
        )
        return leftover

    def feed_eof(self) -> None:
        if self._request is not None:
            return
        if self._head is None and not self._buffer.strip(b"\r\n"):
            self._eof = True
            return
        raise ParseError("connection closed in the middle of a request")

    def _body_length(self, headers: HeaderMap) -> int:
        lowered = {k.lower(): v for k, v in headers.items()}
        if "transfer-encoding" in lowered:
            raise ParseError("transfer codings are not supported")
        raw = lowered.get("content-length")
        if raw is None or raw == "":
            return 0
        try:
            length = int(raw)
        except ValueError as e:
            raise ParseError(f"invalid Content-Length: {raw!r}") from e
        if length < 0:
            raise ParseError(f"invalid Content-Length: {raw!r}")
        if length > self._max_body_bytes:
            raise RequestTooLarge("request body too large")
        return length
