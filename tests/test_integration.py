"""Integration tests.

These tests exercise the full request → gate → service → repository → Redis
pipeline.

What is mocked:
  - Redis replaced with an in-memory fakeredis server (no Docker needed)
  - External HTTP calls mocked per-test with respx

What is NOT mocked (runs real code):
  - FastAPI routes, dependency injection, error envelope handlers
  - RequestGate, ArticleService, ArticleRepository
  - trafilatura / readability extraction
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import fakeredis
import httpx
import pytest
import respx
from fakeredis import aioredis
from fastapi.testclient import TestClient

import app.workers.fetcher as fetcher_module
from app.core.keys import derive_cache_key
from app.main import app

_URL = "https://news.example.com/harbour"

_ARTICLE_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Quiet Harbour Reopens After Storm Repairs</title>
  <meta property="og:title" content="Quiet Harbour Reopens After Storm Repairs">
  <meta name="author" content="Ellen Price">
  <meta property="og:image" content="https://news.example.com/img/harbour.jpg">
</head>
<body>
  <header><nav><a href="/">Home</a> <a href="/world">World</a></nav></header>
  <main>
    <article>
      <h1>Quiet Harbour Reopens After Storm Repairs</h1>
      <p>The harbour reopened on Monday after months of storm repairs that closed
      the main quay and forced the ferry service to a temporary berth further down
      the coast, much to the frustration of traders who rely on the summer trade.</p>
      <p>The harbour master said the new sea wall had been designed to withstand
      stronger storms than the one that breached it last winter, and that the
      fishing fleet would return to its old moorings by the end of the week.</p>
      <p>Local businesses welcomed the news. Several cafes along the front had
      reduced their opening hours while the quay was fenced off, and owners said
      they expected visitor numbers to recover quickly once the ferry returned.</p>
      <p>The repairs were funded jointly by the regional council and a national
      coastal resilience programme, and came in slightly under the original budget
      according to figures published by the council on Friday afternoon.</p>
    </article>
  </main>
  <footer>Copyright Example News</footer>
</body>
</html>
"""


@pytest.fixture
def fake_server():
    return fakeredis.FakeServer()


@pytest.fixture
def integration_client(patched_settings, fake_server):
    """Full-stack client with in-memory Redis and no real HTTP traffic.

    The httpx client is reset before and after each test so that
    respx can intercept the freshly-created client for that test.
    """
    fetcher_module._http_client = None

    redis_cls = MagicMock()
    redis_cls.from_url.side_effect = lambda *args, **kwargs: aioredis.FakeRedis(
        server=fake_server, decode_responses=True
    )

    with (
        patch("app.core.cache.Redis", redis_cls),
        patch("app.main.close_http_client", new_callable=AsyncMock),
    ):
        with TestClient(app) as client:
            yield client

    fetcher_module._http_client = None


@pytest.fixture
def store(fake_server):
    """Synchronous view of the same fake Redis server, for assertions."""
    return fakeredis.FakeRedis(server=fake_server, decode_responses=True)


def _post(client: TestClient, url: str = _URL):
    return client.post("/", json={"url": url, "key": "alpha-key"})


# ── POST / ─────────────────────────────────────────────────────────────────────


class TestIntegrationRetrieval:
    @respx.mock
    def test_miss_then_hit(self, integration_client, store):
        route = respx.get(_URL).mock(return_value=httpx.Response(200, text=_ARTICLE_HTML))

        first = _post(integration_client)
        second = _post(integration_client)

        assert first.status_code == 200
        assert second.status_code == 200
        assert first.json()["cached"] is False
        assert second.json()["cached"] is True
        assert first.json()["article"] == second.json()["article"]
        assert first.json()["article"]["title"] == "Quiet Harbour Reopens After Storm Repairs"
        assert "sea wall" in first.json()["article"]["content"]
        assert route.call_count == 1

    @respx.mock
    def test_entry_written_with_ttl(self, integration_client, store):
        respx.get(_URL).mock(return_value=httpx.Response(200, text=_ARTICLE_HTML))

        article = _post(integration_client).json()["article"]

        key = derive_cache_key(_URL)
        assert store.hgetall(key) == article
        assert 0 < store.ttl(key) <= 10 * 86400

    @respx.mock
    def test_trailing_slash_is_a_separate_entry(self, integration_client, store):
        plain = respx.get(_URL).mock(return_value=httpx.Response(200, text=_ARTICLE_HTML))
        slashed = respx.get(_URL + "/").mock(
            return_value=httpx.Response(200, text=_ARTICLE_HTML)
        )

        assert _post(integration_client, _URL).json()["cached"] is False
        assert _post(integration_client, _URL + "/").json()["cached"] is False
        assert plain.call_count == 1
        assert slashed.call_count == 1
        assert len(store.keys("*")) == 2

    @respx.mock
    def test_fetch_failure_is_not_cached(self, integration_client, store):
        route = respx.get(_URL).mock(return_value=httpx.Response(404, text="gone"))

        first = _post(integration_client)
        second = _post(integration_client)

        assert first.status_code == 500
        assert first.json()["status"] == -1
        assert "404" in first.json()["error"]
        assert second.status_code == 500
        assert route.call_count == 2
        assert store.keys("*") == []

    @respx.mock
    def test_extraction_failure_is_not_cached(self, integration_client, store):
        respx.get(_URL).mock(return_value=httpx.Response(200, text=""))

        resp = _post(integration_client)

        assert resp.status_code == 500
        assert resp.json()["error"] == "Can not extract article"
        assert store.keys("*") == []

    @respx.mock(assert_all_called=False)
    def test_store_outage_fails_request_without_fetching(
        self, integration_client, fake_server
    ):
        route = respx.get(_URL).mock(return_value=httpx.Response(200, text=_ARTICLE_HTML))
        fake_server.connected = False

        resp = _post(integration_client)

        assert resp.status_code == 500
        assert resp.json()["error"] == "Cache read error"
        assert route.call_count == 0

    def test_bad_credential_never_touches_store(self, integration_client, store):
        resp = integration_client.post("/", json={"url": _URL, "key": "nope"})
        assert resp.status_code == 401
        assert store.keys("*") == []


# ── GET /health ────────────────────────────────────────────────────────────────


class TestIntegrationHealth:
    def test_connected(self, integration_client):
        resp = integration_client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["redis"] == "connected"

    def test_error_when_store_down(self, integration_client, fake_server):
        fake_server.connected = False
        resp = integration_client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["redis"] == "error"
