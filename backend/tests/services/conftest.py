"""Service test fixtures - fake upstream clients and real httpx clients for respx."""

import httpx
import pytest

from scaffold_ai.infrastructure.openai_client import OpenAIClient
from scaffold_ai.infrastructure.paradigm_client import ParadigmClient
from tests.fakes import OPENAI_BASE, PARADIGM_BASE, FakeParadigm


@pytest.fixture
def paradigm():
    return FakeParadigm()


@pytest.fixture
async def http_client():
    """Real httpx client; respx intercepts its transport."""
    async with httpx.AsyncClient() as c:
        yield c


@pytest.fixture
def paradigm_client(http_client):
    return ParadigmClient(
        http_client, "paradigm-test-fake-key",
        base_url=PARADIGM_BASE,
        poll_interval_seconds=0,
        poll_max_attempts=3,
    )


@pytest.fixture
def openai_client(http_client):
    return OpenAIClient(http_client, "sk-test-fake-openai-key", base_url=OPENAI_BASE)
