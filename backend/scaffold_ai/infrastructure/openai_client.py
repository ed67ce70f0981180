"""OpenAI Client - chat completions over the REST API.

Invariants:
    - Non-2xx answers raise UpstreamAPIError carrying the upstream error body as details
    - Transport failures propagate as httpx.HTTPError, unreadable 2xx bodies as ValueError
      (callers decide the wording)
"""

import logging
from typing import Any

import httpx

from scaffold_ai.core.errors import UpstreamAPIError

logger = logging.getLogger(__name__)

PROVIDER = "openai"


def _upstream_message(error_body: Any) -> str:
    error = error_body.get("error") if isinstance(error_body, dict) else None
    if isinstance(error, dict):
        return error.get("message") or error.get("type") or "Unknown error"
    return "Unknown error"


def first_message_content(data: Any) -> str | None:
    """Content of the first choice, None when the completion is empty or malformed."""
    choices = data.get("choices") if isinstance(data, dict) else None
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message")
    return message.get("content") if isinstance(message, dict) else None


class OpenAIClient:
    """Minimal chat-completions client. One instance per request."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
    ):
        self._client = http_client
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")

    async def chat_completion(
        self,
        messages: list[dict],
        *,
        model: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> dict:
        body: dict[str, Any] = {"model": model, "messages": messages}
        if temperature is not None:
            body["temperature"] = temperature
        if max_tokens is not None:
            body["max_tokens"] = max_tokens

        response = await self._client.post(
            f"{self.base_url}/chat/completions",
            json=body,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
        )
        logger.info(
            "OpenAI response received",
            extra={"status_code": response.status_code},
        )

        if not response.is_success:
            try:
                error_body = response.json()
            except ValueError:
                error_body = {"error": {"message": response.text}}
            logger.error(f"OpenAI API error details: {error_body}")
            raise UpstreamAPIError(
                f"OpenAI API error: {_upstream_message(error_body)}",
                PROVIDER,
                upstream_status=response.status_code,
                details=error_body,
            )
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("OpenAI returned a non-object response body")
        return data
