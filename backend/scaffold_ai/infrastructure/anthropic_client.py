"""Anthropic Client - wraps AsyncAnthropic with error mapping for connectivity checks.

Invariants:
    - All SDK failures mapped to UpstreamAPIError (core/errors.py)
    - One attempt per call; the SDK's own retries are disabled

Design Decisions:
    - Wrapper over raw client: routes depend on create_message() only, tests swap the wrapper
"""

import logging

import anthropic
from anthropic import (
    APIConnectionError,
    APIError,
    APIStatusError,
    APITimeoutError,
    RateLimitError,
)

from scaffold_ai.core.errors import UpstreamAPIError

logger = logging.getLogger(__name__)

PROVIDER = "anthropic"


class AnthropicClient:
    """Single-call Anthropic messages client."""

    def __init__(self, api_key: str, timeout_seconds: float = 120.0):
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0,
        )

    async def create_message(
        self, *, model: str, max_tokens: int, messages: list,
    ):
        try:
            response = await self.client.messages.create(
                model=model, max_tokens=max_tokens, messages=messages,
            )
        except RateLimitError as e:
            raise UpstreamAPIError(
                "Anthropic rate limit exceeded", PROVIDER,
                upstream_status=429, details=str(e),
            )
        except APITimeoutError:
            raise UpstreamAPIError("Anthropic API timeout", PROVIDER)
        except APIConnectionError as e:
            raise UpstreamAPIError(
                f"Anthropic connection error: {e}", PROVIDER,
            )
        except APIStatusError as e:
            raise UpstreamAPIError(
                f"Anthropic API error: {e.message}", PROVIDER,
                upstream_status=e.status_code, details=str(e),
            )
        except APIError as e:
            raise UpstreamAPIError(f"Anthropic API error: {e}", PROVIDER)

        usage = response.usage
        logger.info(
            f"Anthropic API success (in={usage.input_tokens} "
            f"out={usage.output_tokens} stop={response.stop_reason})",
        )
        return response
