"""Server configuration."""

import os
from dataclasses import dataclass


@dataclass
class ServerConfig:
    """
    Settings for `HttpServer`.

    Attributes:
        host: Address to bind to
        port: Port to bind to; 0 picks a free port
        reply_queue_capacity: How many responses may wait to be written
            before the reader stops parsing (pipelining depth)
        max_header_bytes: Largest accepted request head
        max_body_bytes: Largest accepted request body
        receive_size: Bytes requested per socket read
        server_name: Value of the `Server` response header
        date_refresh_interval: Seconds between `Date` header refreshes
        log_level: Level used by the example runner
    """
    host: str = "127.0.0.1"
    port: int = 8080
    reply_queue_capacity: int = 10
    max_header_bytes: int = 64 * 1024
    max_body_bytes: int = 1 * 1024 * 1024
    receive_size: int = 4096
    server_name: str = "h1conn httpd"
    date_refresh_interval: float = 1.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Build a config from environment variables.

        H1CONN_HOST, H1CONN_PORT, H1CONN_REPLY_QUEUE, H1CONN_MAX_HEADER_BYTES,
        H1CONN_MAX_BODY_BYTES, H1CONN_RECEIVE_SIZE, H1CONN_SERVER_NAME,
        H1CONN_DATE_REFRESH_INTERVAL, H1CONN_LOG_LEVEL
        """
        defaults = cls()
        return cls(
            host=os.getenv("H1CONN_HOST", defaults.host),
            port=int(os.getenv("H1CONN_PORT", str(defaults.port))),
            reply_queue_capacity=int(
                os.getenv("H1CONN_REPLY_QUEUE", str(defaults.reply_queue_capacity))
            ),
            max_header_bytes=int(
                os.getenv("H1CONN_MAX_HEADER_BYTES", str(defaults.max_header_bytes))
            ),
            max_body_bytes=int(
                os.getenv("H1CONN_MAX_BODY_BYTES", str(defaults.max_body_bytes))
            ),
            receive_size=int(os.getenv("H1CONN_RECEIVE_SIZE", str(defaults.receive_size))),
            server_name=os.getenv("H1CONN_SERVER_NAME", defaults.server_name),
            date_refresh_interval=float(
                os.getenv("H1CONN_DATE_REFRESH_INTERVAL", str(defaults.date_refresh_interval))
            ),
            log_level=os.getenv("H1CONN_LOG_LEVEL", defaults.log_level),
        )

    def validate(self) -> None:
        """Raise ValueError on settings the server cannot run with."""
        if not 0 <= self.port <= 65535:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")
        if self.reply_queue_capacity < 1:
            raise ValueError("reply_queue_capacity must be >= 1")
        if self.max_header_bytes < 1 or self.max_body_bytes < 0:
            raise ValueError("request size limits must be positive")
        if self.receive_size < 1:
            raise ValueError("receive_size must be >= 1")
        if self.date_refresh_interval <= 0:
            raise ValueError("date_refresh_interval must be > 0")
