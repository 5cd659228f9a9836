"""HTTP/1.x connection engine on AnyIO: pipelining, ordered replies, keep-alive."""

from .config import ServerConfig
from .primitives.channel import ChannelClosed, ChannelFull, ReplyChannel
from .http.request import HttpRequest, ParseError, RequestParser, RequestTooLarge
from .http.response import HttpResponse, ResponseFinalized
from .http.routes import Handler, Routes
from .server.connection import Connection
from .server.http_server import HttpServer
from .server.registry import ConnectionRegistry, MetricSample, ServerStats

__all__ = [
    # Configuration
    "ServerConfig",
    # Primitives
    "ReplyChannel",
    "ChannelClosed",
    "ChannelFull",
    # HTTP types
    "HttpRequest",
    "HttpResponse",
    "RequestParser",
    "ParseError",
    "RequestTooLarge",
    "ResponseFinalized",
    "Handler",
    "Routes",
    # Engine
    "Connection",
    "ConnectionRegistry",
    "HttpServer",
    "MetricSample",
    "ServerStats",
]
