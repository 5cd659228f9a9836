"""HTTP response type.

A response is built by the dispatch step and the route handler, then
finalized with `done()`. After that its response line and headers are fixed
and only the writer touches it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping


_STATUS_TEXT: dict[int, str] = {
    100: "Continue",
    200: "OK",
    201: "Created",
    202: "Accepted",
    204: "No Content",
    301: "Moved Permanently",
    302: "Found",
    304: "Not Modified",
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    413: "Payload Too Large",
    500: "Internal Server Error",
    501: "Not Implemented",
    503: "Service Unavailable",
}


def status_text(status: int) -> str:
    return _STATUS_TEXT.get(status, "OK")


class ResponseFinalized(RuntimeError):
    """Raised when mutating a response after done()."""
    pass


@dataclass(slots=True)
class HttpResponse:
    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "1.1"
    response_line: str = ""
    finalized: bool = False

    @staticmethod
    def text(
        text: str,
        *,
        status: int = 200,
        headers: Mapping[str, str] | None = None,
        encoding: str = "utf-8",
    ) -> "HttpResponse":
        resp = HttpResponse(status=status, body=text.encode(encoding))
        resp.set_content_type(f"text/plain; charset={encoding}")
        return resp._merge_headers(headers)

    @staticmethod
    def json(
        obj: Any,
        *,
        status: int = 200,
        headers: Mapping[str, str] | None = None,
    ) -> "HttpResponse":
        body = json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        resp = HttpResponse(status=status, body=body)
        resp.set_content_type("application/json; charset=utf-8")
        return resp._merge_headers(headers)

    def _merge_headers(self, headers: Mapping[str, str] | None) -> "HttpResponse":
        for name, value in (headers or {}).items():
            self.replace_header(name, value)
        return self

    def _check_mutable(self) -> None:
        if self.finalized:
            raise ResponseFinalized("response already finalized")

    def set_version(self, version: str) -> "HttpResponse":
        self._check_mutable()
        self.version = version
        return self

    def set_header(self, name: str, value: str) -> "HttpResponse":
        self._check_mutable()
        self.headers[name] = value
        return self

    def replace_header(self, name: str, value: str) -> "HttpResponse":
        """Set a header, dropping any existing spelling of the same name."""
        self._check_mutable()
        lowered = name.lower()
        for key in [k for k in self.headers if k.lower() == lowered]:
            del self.headers[key]
        self.headers[name] = value
        return self

    def set_content_type(self, content_type: str) -> "HttpResponse":
        return self.replace_header("Content-Type", content_type)

    def done(self) -> "HttpResponse":
        """Build the response line and freeze the response."""
        self._check_mutable()
        self.response_line = f"HTTP/{self.version} {self.status} {status_text(self.status)}\r\n"
        self.finalized = True
        return self

