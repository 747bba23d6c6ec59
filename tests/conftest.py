import pytest
from fastapi.testclient import TestClient

from src.core.config import settings
from src.main import app


@pytest.fixture(autouse=True)
def credentials(monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test-key")
    monkeypatch.setattr(settings, "MAPBOX_TOKEN", "pk.test-token")
    monkeypatch.setattr(settings, "OPENAI_MODEL", "gpt-4o-mini")
    monkeypatch.setattr(settings, "OPENAI_TEMPERATURE", 0.6)
    monkeypatch.setattr(settings, "GEOCODE_CONCURRENCY", 1)


@pytest.fixture
def client():
    return TestClient(app)
