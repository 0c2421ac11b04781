"""
Pytest Configuration and Fixtures

Shared fixtures for unit and integration tests.
"""

from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock, MagicMock

import orjson
import pytest
from fastapi.testclient import TestClient

from speechcast.config import Settings, get_settings
from speechcast.core.models import ContentCatalog


PRESENTER_PASSWORD = "test-secret"


# ══════════════════════════════════════════════════════════════
# Settings Fixtures
# ══════════════════════════════════════════════════════════════


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Keep the cached settings from leaking between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def content_file(tmp_path: Path) -> Path:
    """Path of a content file that does not exist yet."""
    return tmp_path / "speech.json"


@pytest.fixture
def test_settings(content_file: Path) -> Settings:
    """Test settings pointing at a temporary content file."""
    return Settings(
        _env_file=None,
        presenter_password=PRESENTER_PASSWORD,
        app_env="development",
        debug=True,
        content_file=content_file,
    )


# ══════════════════════════════════════════════════════════════
# Content Fixtures
# ══════════════════════════════════════════════════════════════


@pytest.fixture
def small_catalog() -> ContentCatalog:
    """Two English sections, one French, no German."""
    return ContentCatalog(sections={"en": ["A", "B"], "fr": ["Un"]})


@pytest.fixture
def write_content(content_file: Path):
    """Write a raw document to the content file."""

    def _write(document) -> Path:
        content_file.write_bytes(orjson.dumps(document))
        return content_file

    return _write


# ══════════════════════════════════════════════════════════════
# Application Fixtures
# ══════════════════════════════════════════════════════════════


@pytest.fixture
def app(test_settings: Settings):
    """Create test application instance."""
    from speechcast.api.app import create_app

    return create_app(test_settings)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Test client sharing one event loop between HTTP and WebSocket calls."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def credentials() -> dict[str, str]:
    return {"password": PRESENTER_PASSWORD}


# ══════════════════════════════════════════════════════════════
# Mock Fixtures
# ══════════════════════════════════════════════════════════════


@pytest.fixture
def websocket_factory():
    """Build independent mock WebSockets."""

    def _make():
        ws = MagicMock()
        ws.accept = AsyncMock()
        ws.close = AsyncMock()
        ws.send_json = AsyncMock()
        ws.client.host = "127.0.0.1"
        return ws

    return _make


@pytest.fixture
def mock_websocket(websocket_factory):
    """Create a mock WebSocket."""
    return websocket_factory()
