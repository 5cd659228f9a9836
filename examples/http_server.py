"""
HTTP Server Example

Runs the h1conn engine behind a TCP listener.

- Each TCP connection gets a read loop and a respond loop.
- Requests may be pipelined; responses come back in order.
- HTTP/1.1 connections stay open unless the client sends `Connection: Close`.

Run:
  H1CONN_PORT=8080 python examples/http_server.py

Then try:
  curl -i http://127.0.0.1:8080/
  curl -i 'http://127.0.0.1:8080/hello?name=there'
  curl -i -X POST http://127.0.0.1:8080/echo -d 'hello there'
  curl -i http://127.0.0.1:8080/stats
"""

from __future__ import annotations

import dataclasses
import logging

import anyio

from h1conn import HttpRequest, HttpResponse, HttpServer, Routes, ServerConfig


routes = Routes()
server: HttpServer | None = None


@routes.route("GET", "/")
async def handle_root(_req: HttpRequest, resp: HttpResponse) -> HttpResponse:
    resp.set_content_type("text/plain; charset=utf-8")
    resp.body = b"hello from h1conn\n"
    return resp


@routes.route("GET", "/hello")
async def handle_hello(req: HttpRequest, resp: HttpResponse) -> HttpResponse:
    name = req.query_parameters.get("name", "world")
    resp.set_content_type("text/plain; charset=utf-8")
    resp.body = f"hello {name}\n".encode("utf-8")
    return resp


@routes.route("POST", "/echo")
async def handle_echo(req: HttpRequest, resp: HttpResponse) -> HttpResponse:
    # Echo the raw body bytes back.
    resp.set_content_type(req.header("Content-Type", "application/octet-stream"))
    resp.body = req.body
    return resp


@routes.route("GET", "/stats")
async def handle_stats(_req: HttpRequest, resp: HttpResponse) -> HttpResponse:
    assert server is not None
    stats = HttpResponse.json(dataclasses.asdict(server.counts()))
    stats.version = resp.version
    return stats


async def main() -> None:
    global server
    config = ServerConfig.from_env()
    logging.basicConfig(level=config.log_level)

    server = HttpServer(routes, config)
    async with anyio.create_task_group() as tg:
        await server.start(tg)

        print(f"Listening on http://{config.host}:{server.port}")
        print("Press Ctrl-C to stop.")

        # Keep the app alive.
        await anyio.sleep_forever()


if __name__ == "__main__":
    anyio.run(main)
