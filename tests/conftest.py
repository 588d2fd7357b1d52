import httpx
import pytest
from fastapi.testclient import TestClient

from bookrec.client import GeminiClient
from bookrec.config import Settings
from bookrec.main import app, get_client, get_session
from bookrec.recommender import RecommendationSession


def gemini_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


@pytest.fixture
def settings():
    return Settings(
        gemini_api_key="test-key",
        gemini_base_url="https://gemini.test/v1",
        gemini_model="gemini-2.5-flash",
        request_timeout=5,
    )


@pytest.fixture
def make_client(settings):
    def _make(handler, **overrides):
        s = settings.model_copy(update=overrides)
        return GeminiClient(s, transport=httpx.MockTransport(handler))
    return _make


@pytest.fixture
def session():
    return RecommendationSession()


@pytest.fixture
def remote():
    """Scripted remote API; replace ``remote["handler"]`` to change its answer."""
    return {"handler": lambda request: httpx.Response(200, json=gemini_body("1. Dune by Frank Herbert"))}


@pytest.fixture
def api(session, make_client, remote):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_client] = lambda: make_client(lambda request: remote["handler"](request))
    yield TestClient(app)
    app.dependency_overrides.clear()
