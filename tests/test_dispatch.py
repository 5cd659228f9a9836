"""Tests for the dispatch step: keep-alive policy and reply generation."""

import pytest

from h1conn import HttpRequest, HttpResponse, Routes
from h1conn.server import generate_reply, keep_alive_policy


pytestmark = pytest.mark.anyio

DATE = "Mon, 19 Oct 2026 10:00:00 GMT"


def request(target="/", version="1.1", method="GET", **headers):
    return HttpRequest(method=method, target=target, version=version, headers=headers)


async def reply(req, routes=None):
    return await generate_reply(req, routes or Routes(), server_name="test-server", date=DATE)


@pytest.mark.parametrize(
    ("version", "connection", "should_close", "echo"),
    [
        ("1.0", "Keep-Alive", False, True),
        ("1.0", "keep-alive", False, True),
        ("1.0", None, True, False),
        ("1.0", "Close", True, False),
        ("1.1", "Close", True, False),
        ("1.1", "close", True, False),
        ("1.1", None, False, False),
        ("1.1", "Keep-Alive", False, False),
        ("0.9", None, True, False),
        ("0.9", "Keep-Alive", True, False),
        ("2.0", None, True, False),
    ],
)
def test_keep_alive_policy(version, connection, should_close, echo):
    assert keep_alive_policy(version, connection) == (should_close, echo)


class TestGenerateReply:

    async def test_http11_default_stays_open(self):
        resp, should_close = await reply(request())
        assert should_close is False
        assert resp.finalized
        assert resp.response_line == "HTTP/1.1 404 Not Found\r\n"
        assert "Connection" not in resp.headers

    async def test_http11_close(self):
        _, should_close = await reply(request(Connection="Close"))
        assert should_close is True

    async def test_http10_keep_alive_echoed(self):
        resp, should_close = await reply(request(version="1.0", Connection="Keep-Alive"))
        assert should_close is False
        assert resp.headers["Connection"] == "Keep-Alive"
        assert resp.response_line.startswith("HTTP/1.0 ")

    async def test_http10_default_closes(self):
        resp, should_close = await reply(request(version="1.0"))
        assert should_close is True
        assert "Connection" not in resp.headers

    async def test_keep_alive_survives_fresh_handler_response(self):
        routes = Routes()

        async def fresh(_req, _resp):
            return HttpResponse.text("new object")

        routes.add("GET", "/", fresh)
        resp, _ = await reply(request(version="1.0", Connection="Keep-Alive"), routes)
        assert resp.headers["Connection"] == "Keep-Alive"
        assert resp.version == "1.0"

    async def test_transport_headers_set(self):
        routes = Routes()

        async def hello(_req, resp):
            resp.body = b"hello!"
            return resp

        routes.add("GET", "/hello", hello)
        resp, _ = await reply(request("/hello"), routes)
        assert resp.status == 200
        assert resp.headers["Server"] == "test-server"
        assert resp.headers["Date"] == DATE
        assert resp.headers["Content-Length"] == "6"

    async def test_transport_headers_overwrite_handler_values(self):
        routes = Routes()

        async def liar(_req, resp):
            resp.set_header("content-length", "999")
            resp.set_header("Server", "handler")
            resp.set_header("X-Custom", "kept")
            resp.body = b"abc"
            return resp

        routes.add("GET", "/", liar)
        resp, _ = await reply(request(), routes)
        assert resp.headers == {
            "X-Custom": "kept",
            "Server": "test-server",
            "Date": DATE,
            "Content-Length": "3",
        }

    async def test_query_is_split_off_the_routed_path(self):
        routes = Routes()
        seen = []

        async def search(req, resp):
            seen.append(req)
            return resp

        routes.add("GET", "/search", search)
        resp, _ = await reply(request("/search?q=cats&n=2"), routes)
        assert resp.status == 200
        assert seen[0].path == "/search"
        assert seen[0].query == "q=cats&n=2"
        assert seen[0].query_parameters == {"q": "cats", "n": "2"}

    async def test_wrong_method_is_405(self):
        routes = Routes()

        async def handler(_req, resp):
            return resp

        routes.add("POST", "/submit", handler)
        resp, _ = await reply(request("/submit"), routes)
        assert resp.status == 405

    async def test_router_failure_propagates(self):
        routes = Routes()

        @routes.route("GET", "/boom")
        async def boom(_req, _resp):
            raise RuntimeError("handler exploded")

        with pytest.raises(RuntimeError, match="handler exploded"):
            await reply(request("/boom"), routes)
