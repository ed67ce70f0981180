"""Connectivity Diagnostics - one tiny request per LLM provider to prove the key works.

Invariants:
    - Never logs a full API key (10-character prefix only)
    - Missing keys -> 500 configuration error, no upstream call
"""

import logging

import httpx
from fastapi import APIRouter, Depends

from scaffold_ai.api.dependencies import (
    build_openai_client,
    get_anthropic_client,
    get_http_client,
)
from scaffold_ai.config import Settings, get_settings
from scaffold_ai.core.errors import ConfigurationError, ExternalServiceError
from scaffold_ai.infrastructure.anthropic_client import AnthropicClient
from scaffold_ai.infrastructure.observability import mask_key
from scaffold_ai.infrastructure.openai_client import first_message_content

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["diagnostics"])

_PING = [{"role": "user", "content": 'Say "Hello, API is working!"'}]
_PING_MAX_TOKENS = 10


@router.get("/test-openai")
async def test_openai(
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    openai = build_openai_client(http_client, settings)
    logger.info(f"Testing OpenAI API with key: {mask_key(settings.openai_api_key)}")
    try:
        data = await openai.chat_completion(
            _PING, model=settings.openai_test_model, max_tokens=_PING_MAX_TOKENS,
        )
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Test error: {e}", exc_info=True)
        raise ExternalServiceError("Failed to test OpenAI API", details=str(e)) from e

    return {
        "success": True,
        "message": "OpenAI API is working!",
        "response": first_message_content(data),
        "usage": data.get("usage"),
    }


@router.get("/test-claude")
async def test_claude(
    settings: Settings = Depends(get_settings),
    anthropic: AnthropicClient | None = Depends(get_anthropic_client),
):
    if anthropic is None:
        raise ConfigurationError("Anthropic API key not set")
    logger.info(f"Testing Anthropic API with key: {mask_key(settings.anthropic_api_key or '')}")

    response = await anthropic.create_message(
        model=settings.anthropic_test_model,
        max_tokens=_PING_MAX_TOKENS,
        messages=_PING,
    )
    if response.stop_reason != "end_turn":
        logger.error(f"Test API error: stop_reason={response.stop_reason}")
        raise ExternalServiceError(
            f"Anthropic API test failed: {response.stop_reason or 'Unknown error'}",
            details={"stop_reason": response.stop_reason},
        )

    first = response.content[0] if response.content else None
    text = first.text if first is not None and first.type == "text" else None
    return {
        "success": True,
        "message": "Anthropic API is working!",
        "response": text,
        "usage": {
            "input_tokens": response.usage.input_tokens,
            "output_tokens": response.usage.output_tokens,
        },
    }
