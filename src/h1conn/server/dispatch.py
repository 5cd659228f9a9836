"""Turns one parsed request into one finalized response and a close decision."""

from __future__ import annotations

import dataclasses

from ..http.request import HttpRequest, split_target
from ..http.response import HttpResponse
from ..http.routes import Routes


KEEP_ALIVE = "keep-alive"
CLOSE = "close"


def keep_alive_policy(version: str, connection: str | None) -> tuple[bool, bool]:
    """
    Decide whether the connection closes after this request.

    Returns (should_close, echo_keep_alive). The Connection header value is
    compared case-insensitively.

        1.0 + Keep-Alive   -> stay open, echo "Connection: Keep-Alive"
        1.0 otherwise      -> close
        1.1 + Close        -> close
        1.1 otherwise      -> stay open
        any other version  -> close
    """
    value = (connection or "").strip().lower()
    match version:
        case "1.0":
            keep_alive = value == KEEP_ALIVE
            return (not keep_alive, keep_alive)
        case "1.1":
            return (value == CLOSE, False)
        case _:
            return (True, False)


def decorate(response: HttpResponse, *, server_name: str, date: str) -> HttpResponse:
    """Set Server, Date and Content-Length, replacing any handler values."""
    response.replace_header("Server", server_name)
    response.replace_header("Date", date)
    response.replace_header("Content-Length", str(len(response.body)))
    return response


async def generate_reply(
    request: HttpRequest,
    routes: Routes,
    *,
    server_name: str,
    date: str,
) -> tuple[HttpResponse, bool]:
    """
    Run `request` through the router.

    The router sees only the path; the query string reaches handlers through
    `request.query` and `request.query_parameters`. Router failures propagate.
    """
    should_close, keep_alive = keep_alive_policy(request.version, request.header("Connection"))

    resp = HttpResponse()
    resp.set_version(request.version)
    if keep_alive:
        resp.set_header("Connection", "Keep-Alive")

    path, query, params = split_target(request.target)
    request = dataclasses.replace(request, path=path, query=query, query_parameters=params)

    rep = await routes.handle(path, request, resp)
    rep.set_version(request.version)
    if keep_alive:
        rep.replace_header("Connection", "Keep-Alive")
    decorate(rep, server_name=server_name, date=date)
    rep.done()
    return rep, should_close
