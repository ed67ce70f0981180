"""API Dependencies - Depends() factories for settings and upstream clients.

Invariants:
    - One httpx.AsyncClient per request, closed when the response is sent
    - Factories never check secrets; routes decide when a missing key is an error
"""

from collections.abc import AsyncIterator

import httpx
from fastapi import Depends

from scaffold_ai.config import Settings, get_settings
from scaffold_ai.core.errors import ConfigurationError
from scaffold_ai.infrastructure.anthropic_client import AnthropicClient
from scaffold_ai.infrastructure.openai_client import OpenAIClient
from scaffold_ai.infrastructure.paradigm_client import ParadigmClient
from scaffold_ai.services.workflow_executor import WorkflowExecutor


async def get_http_client(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
        yield client


def require_paradigm_key(settings: Settings) -> str:
    if not settings.paradigm_api_key:
        raise ConfigurationError(
            "Paradigm API key not configured",
            details=(
                "Please set the PARADIGM_API_KEY environment variable to use "
                "this workflow execution service."
            ),
        )
    return settings.paradigm_api_key


def require_openai_key(settings: Settings) -> str:
    if not settings.openai_api_key:
        raise ConfigurationError("OpenAI API key not set.")
    return settings.openai_api_key


def build_workflow_executor(
    http_client: httpx.AsyncClient, settings: Settings,
) -> WorkflowExecutor:
    """Executor wired to Paradigm; raises ConfigurationError without a key."""
    paradigm = ParadigmClient(
        http_client,
        require_paradigm_key(settings),
        base_url=settings.paradigm_base_url,
        default_model=settings.paradigm_default_model,
        poll_interval_seconds=settings.analysis_poll_interval_seconds,
        poll_max_attempts=settings.analysis_poll_max_attempts,
    )
    return WorkflowExecutor(paradigm)


def build_openai_client(
    http_client: httpx.AsyncClient, settings: Settings,
) -> OpenAIClient:
    return OpenAIClient(
        http_client, require_openai_key(settings), base_url=settings.openai_base_url,
    )


def get_anthropic_client(
    settings: Settings = Depends(get_settings),
) -> AnthropicClient | None:
    """None when no key is configured."""
    if not settings.anthropic_api_key:
        return None
    return AnthropicClient(
        settings.anthropic_api_key, timeout_seconds=settings.http_timeout_seconds,
    )
