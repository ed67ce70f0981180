"""Root conftest - shared test configuration.

Invariants:
    - Fake API keys are set before the app imports settings
    - Route tests go through the real app via ASGITransport (no network)
    - dependency_overrides cleared after every test

Design Decisions:
    - Upstream HTTP is mocked with respx; the ASGI transport never touches it
"""

import os

import pytest
from httpx import ASGITransport, AsyncClient

# Ensure tests don't accidentally use real API keys
os.environ.setdefault("PARADIGM_API_KEY", "paradigm-test-fake-key")
os.environ.setdefault("OPENAI_API_KEY", "sk-test-fake-openai-key")
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-fake-key")

from scaffold_ai.config import Settings, get_settings  # noqa: E402
from scaffold_ai.main import app  # noqa: E402
from tests.fakes import OPENAI_BASE, PARADIGM_BASE  # noqa: E402


def make_settings(**overrides) -> Settings:
    """Settings pointed at fake upstream hosts, keys configured unless overridden."""
    values = {
        "paradigm_api_key": "paradigm-test-fake-key",
        "paradigm_base_url": PARADIGM_BASE,
        "openai_api_key": "sk-test-fake-openai-key",
        "openai_base_url": OPENAI_BASE,
        "anthropic_api_key": "sk-ant-test-fake-key",
        "analysis_poll_interval_seconds": 0.0,
        "analysis_poll_max_attempts": 3,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def override_settings():
    """Swap the app's settings mid-test, e.g. override_settings(openai_api_key="")."""
    def _apply(**overrides) -> Settings:
        replaced = make_settings(**overrides)
        app.dependency_overrides[get_settings] = lambda: replaced
        return replaced
    return _apply


@pytest.fixture
async def client(settings):
    """FastAPI test client with settings overridden."""
    app.dependency_overrides[get_settings] = lambda: settings

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
