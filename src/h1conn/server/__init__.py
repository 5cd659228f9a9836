"""Connection engine: per-connection loops, dispatch policy, registry and server."""

from .connection import Connection
from .dispatch import decorate, generate_reply, keep_alive_policy
from .http_server import HttpServer, generate_server_name, http_date
from .registry import ConnectionRegistry, MetricSample, ServerStats

__all__ = [
    "Connection",
    "ConnectionRegistry",
    "HttpServer",
    "MetricSample",
    "ServerStats",
    "decorate",
    "generate_reply",
    "generate_server_name",
    "http_date",
    "keep_alive_policy",
]
