import httpx
import pytest
from httpx import ASGITransport


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "test-key")
    monkeypatch.setenv("DEBOUNCE_MS", "10")
    monkeypatch.setenv("NOMINATIM_USER_AGENT", "placefinder-tests/0.1")


@pytest.fixture
async def client(mock_env):
    from placefinder.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c
