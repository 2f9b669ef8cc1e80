from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import app

CREDENTIALS = ("alpha-key", "beta-key")


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        secret_key=",".join(CREDENTIALS),
        redis_url="redis://localhost:6379/0",
        environment="development",
    )


@pytest.fixture
def patched_settings(test_settings):
    """Point every module that reads settings at request time to ``test_settings``."""
    with (
        patch("app.main.settings", test_settings),
        patch("app.core.cache.settings", test_settings),
        patch("app.api.article.routes.settings", test_settings),
        patch("app.api.health.routes.settings", test_settings),
    ):
        yield test_settings


@pytest.fixture
def client(patched_settings):
    """TestClient with lifespan startup/shutdown hooks fully mocked."""
    with (
        patch(
            "app.core.cache.CacheManager.connect",
            new_callable=AsyncMock,
        ),
        patch(
            "app.core.cache.CacheManager.disconnect",
            new_callable=AsyncMock,
        ),
        patch(
            "app.core.cache.CacheManager.get_client",
            return_value=MagicMock(),
        ),
        patch(
            "app.main.close_http_client",
            new_callable=AsyncMock,
        ),
    ):
        with TestClient(app) as c:
            yield c
