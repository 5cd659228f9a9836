"""Routing table mapping (method, path) to async handlers."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Mapping

from .request import HttpRequest
from .response import HttpResponse


logger = logging.getLogger(__name__)

Handler = Callable[[HttpRequest, HttpResponse], Awaitable[HttpResponse]]


class Routes:
    """
    Dispatches a routed path to the handler registered for it.

    Handlers receive the request and a response template (already carrying
    the negotiated version and connection headers) and return the response to
    send, usually the template itself after filling it in.

    Unknown paths get 404, known paths with an unregistered method get 405.
    Handler exceptions are not caught here.
    """

    def __init__(self, routes: Mapping[tuple[str, str], Handler] | None = None):
        self._routes: dict[tuple[str, str], Handler] = {}
        for (method, path), handler in (routes or {}).items():
            self.add(method, path, handler)

    def add(self, method: str, path: str, handler: Handler) -> None:
        self._routes[(method.upper(), path)] = handler

    def route(self, method: str, path: str) -> Callable[[Handler], Handler]:
        """Decorator form of add()."""
        def decorator(handler: Handler) -> Handler:
            self.add(method, path, handler)
            return handler
        return decorator

    def __contains__(self, key: tuple[str, str]) -> bool:
        method, path = key
        return (method.upper(), path) in self._routes

    async def handle(self, path: str, request: HttpRequest, response: HttpResponse) -> HttpResponse:
        handler = self._routes.get((request.method.upper(), path))
        if handler is not None:
            return await handler(request, response)

        if any(p == path for _, p in self._routes):
            logger.debug("method %s not allowed for %s", request.method, path)
            response.status = 405
            response.set_content_type("text/plain; charset=utf-8")
            response.body = b"method not allowed"
            return response

        logger.debug("no route for %s %s", request.method, path)
        response.status = 404
        response.set_content_type("text/plain; charset=utf-8")
        response.body = b"not found"
        return response
