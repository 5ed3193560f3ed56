from __future__ import annotations

import asyncio
import json

import httpx

from src.adapters.http.revalidate import HttpRevalidationNotifier, NoOpNotifier


def _notifier(handler, **kwargs) -> HttpRevalidationNotifier:
    return HttpRevalidationNotifier(
        frontend_url="https://blog.example.com/",
        token="s3cret",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_posts_slug_and_path_with_bearer_token(caplog):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"revalidated": True})

    caplog.set_level("INFO")
    ok = asyncio.run(_notifier(handler).notify("hello-world", "en"))

    assert ok is True
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://blog.example.com/api/revalidate"
    assert request.headers["Authorization"] == "Bearer s3cret"
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.content) == {"path": "/blog", "slug": "hello-world"}
    assert "Cache revalidated for hello-world (en)" in caplog.text


def test_non_2xx_is_logged_and_reported(caplog):
    ok = asyncio.run(_notifier(lambda r: httpx.Response(500)).notify("post", "it"))

    assert ok is False
    assert "HTTP 500" in caplog.text


def test_timeout_is_swallowed(caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    ok = asyncio.run(_notifier(handler, timeout_seconds=0.5).notify("post", "en"))

    assert ok is False
    assert "timed out" in caplog.text


def test_network_error_is_swallowed(caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    ok = asyncio.run(_notifier(handler).notify("post", "en"))

    assert ok is False
    assert "Cache revalidation failed for post (en)" in caplog.text


def test_custom_path():
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(204)

    asyncio.run(_notifier(handler, path="/it/blog").notify("ciao", "it"))

    assert bodies == [{"path": "/it/blog", "slug": "ciao"}]


def test_url_is_built_from_frontend_url():
    n = HttpRevalidationNotifier(frontend_url="http://localhost:3000", token="t")
    assert n.url == "http://localhost:3000/api/revalidate"


def test_noop_notifier():
    assert asyncio.run(NoOpNotifier().notify("post", "en")) is False
