"""HTTP building blocks consumed by the connection engine.

Request parsing, the response type, the routing table and the buffered
stream reader/writer live here; the engine itself is in `h1conn.server`.
"""

from .request import HttpRequest, ParseError, RequestParser, RequestTooLarge, split_target
from .response import HttpResponse, ResponseFinalized
from .routes import Handler, Routes
from .streams import StreamReader, StreamWriter

__all__ = [
    "HttpRequest",
    "HttpResponse",
    "Handler",
    "ParseError",
    "RequestParser",
    "RequestTooLarge",
    "ResponseFinalized",
    "Routes",
    "StreamReader",
    "StreamWriter",
    "split_target",
]
