from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from decision_tracker import main
from decision_tracker.config import Settings
from decision_tracker.main import create_app

ENV_VARS = (
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "PPLX_API_KEY",
    "PPLX_MODEL",
    "DATABASE_URL",
    "SENTRY_DSN",
    "PHOENIX_API_KEY",
)

USER = "11111111-1111-1111-1111-111111111111"
OTHER_USER = "22222222-2222-2222-2222-222222222222"


def make_settings(**values):
    """Settings built only from the given values, ignoring any .env file."""
    return Settings(_env_file=None, **values)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def completion(content, **extra):
    """Build an object shaped like an OpenAI chat completion."""
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)], **extra)


@pytest.fixture
def settings(tmp_path):
    return make_settings(
        openai_api_key="sk-test",
        pplx_api_key="pplx-test",
        database_url=f"sqlite:///{tmp_path}/test.db",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def mock_openai(monkeypatch):
    """Replace the OpenAI client factory with a mock async client."""
    mock_client = MagicMock()
    mock_client.chat.completions.create = AsyncMock()
    monkeypatch.setattr(main, "openai_client", lambda settings: mock_client)
    return mock_client


@pytest.fixture
def mock_perplexity(monkeypatch):
    mock_client = MagicMock()
    mock_client.chat.completions.create = AsyncMock()
    monkeypatch.setattr(main, "perplexity_client", lambda settings: mock_client)
    return mock_client


@pytest.fixture
def headers():
    return {"X-User-Id": USER}


@pytest.fixture
def other_headers():
    return {"X-User-Id": OTHER_USER}
