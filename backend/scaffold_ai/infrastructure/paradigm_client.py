"""Paradigm Client - thin async client for the Paradigm document search / analysis API family.

Invariants:
    - Every request carries "Authorization: Bearer <key>" and a JSON body
    - None-valued fields are omitted from request bodies
    - Non-2xx answers raise UpstreamAPIError("<Operation> failed: <status> <reason>")
    - A failed analysis status raises, whether it arrives on start or while polling
    - Document analysis polls at a fixed interval for a fixed number of attempts, no backoff
    - No retries: one request per operation (polling aside)

Design Decisions:
    - Shared httpx.AsyncClient injected by the caller (request-scoped lifecycle)
    - Operations return the upstream JSON untouched
"""

import asyncio
import logging
from typing import Any

import httpx

from scaffold_ai.core.errors import ErrorContext, UpstreamAPIError

logger = logging.getLogger(__name__)

PROVIDER = "paradigm"

_ANALYSIS_DONE = frozenset({"completed", "complete", "done", "success", "succeeded"})
_ANALYSIS_FAILED = frozenset({"failed", "error"})


def _compact(body: dict) -> dict:
    return {k: v for k, v in body.items() if v is not None}


class ParadigmClient:
    """Paradigm REST client. One instance per request."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        base_url: str = "https://paradigm.lighton.ai/api/v2",
        default_model: str = "alfred-4.2",
        poll_interval_seconds: float = 2.0,
        poll_max_attempts: int = 30,
    ):
        self._client = http_client
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.default_model = default_model
        self.poll_interval_seconds = poll_interval_seconds
        self.poll_max_attempts = poll_max_attempts

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    async def _post(self, path: str, body: dict, operation: str) -> Any:
        response = await self._client.post(
            f"{self.base_url}{path}", json=_compact(body), headers=self._headers,
        )
        return self._json_or_raise(response, operation)

    async def _get(self, path: str, operation: str) -> Any:
        response = await self._client.get(
            f"{self.base_url}{path}", headers=self._headers,
        )
        return self._json_or_raise(response, operation)

    def _json_or_raise(self, response: httpx.Response, operation: str) -> Any:
        if not response.is_success:
            logger.warning(
                f"{operation} failed upstream",
                extra={
                    "endpoint": str(response.request.url),
                    "status_code": response.status_code,
                },
            )
            raise UpstreamAPIError(
                f"{operation} failed: {response.status_code} {response.reason_phrase}",
                PROVIDER,
                upstream_status=response.status_code,
                context=ErrorContext(endpoint=str(response.request.url)),
            )
        return response.json()

    # ─── Operations ──────────────────────────────────────────────

    async def document_search(
        self,
        query: str | None,
        *,
        model: str | None = None,
        workspace_ids: list | None = None,
        file_ids: list | None = None,
        chat_session_id: Any = None,
        company_scope: bool | None = None,
        private_scope: bool | None = None,
        tool: str | None = None,
        private: bool | None = None,
    ) -> Any:
        return await self._post("/chat/document-search", {
            "query": query,
            "model": model or self.default_model,
            "workspace_ids": workspace_ids,
            "file_ids": file_ids,
            "chat_session_id": chat_session_id,
            "company_scope": company_scope,
            "private_scope": private_scope,
            "tool": tool or "DocumentSearch",
            "private": private,
        }, "Document search")

    async def sentence_search(self, sentence: str, model: str | None = None) -> Any:
        """Document search that asks for a direct answer to one question."""
        body = {
            "query": sentence,
            "model": model or self.default_model,
            "tool": "DocumentSearch",
            "user_instructions": (
                "Please answer the following question specifically and "
                f"directly: {sentence}. Do not provide general information "
                "unless it directly relates to the question asked."
            ),
        }
        response = await self._client.post(
            f"{self.base_url}/chat/document-search", json=body, headers=self._headers,
        )
        if not response.is_success:
            try:
                upstream = response.json()
            except ValueError:
                upstream = {}
            reason = upstream.get("error", "") if isinstance(upstream, dict) else ""
            raise UpstreamAPIError(
                f"Document search failed: {response.reason_phrase} - {reason}",
                PROVIDER,
                upstream_status=response.status_code,
                details=upstream or None,
                context=ErrorContext(endpoint=str(response.request.url)),
            )
        return response.json()

    async def document_analysis(
        self,
        query: str | None,
        document_ids: list | None,
        *,
        model: str | None = None,
        private: bool | None = None,
    ) -> Any:
        """Start an analysis and wait for it when the API answers asynchronously."""
        started = await self._post("/chat/document-analysis", {
            "query": query,
            "document_ids": document_ids,
            "model": model or self.default_model,
            "private": private,
        }, "Document analysis")

        _raise_if_failed(started, f"{self.base_url}/chat/document-analysis")
        response_id = _pending_analysis_id(started)
        if response_id is None:
            return started
        return await self._poll_analysis(response_id)

    async def _poll_analysis(self, response_id: Any) -> Any:
        for attempt in range(1, self.poll_max_attempts + 1):
            await asyncio.sleep(self.poll_interval_seconds)
            path = f"/chat/document-analysis/{response_id}"
            result = await self._get(path, "Document analysis")
            _raise_if_failed(result, f"{self.base_url}{path}")
            status = _analysis_status(result)
            if status in _ANALYSIS_DONE:
                logger.info(
                    "Document analysis completed",
                    extra={"attempt": attempt},
                )
                return result
            logger.debug(
                f"Document analysis {response_id} still {status or 'pending'}",
                extra={"attempt": attempt},
            )
        raise UpstreamAPIError(
            f"Document analysis timed out after {self.poll_max_attempts} attempts",
            PROVIDER,
            context=ErrorContext(
                endpoint=f"{self.base_url}/chat/document-analysis/{response_id}",
            ),
        )

    async def image_analysis(
        self,
        query: str | None,
        document_ids: list | None,
        *,
        model: str | None = None,
        private: bool | None = None,
    ) -> Any:
        return await self._post("/chat/image-analysis", {
            "query": query,
            "document_ids": document_ids,
            "model": model or self.default_model,
            "private": private,
        }, "Image analysis")

    async def query(
        self, query: str | None, *, collection: str | None = None, n: int | None = None,
    ) -> Any:
        return await self._post("/query", {
            "query": query, "collection": collection, "n": n,
        }, "Query")

    async def chat_completion(
        self,
        messages: list | None,
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> Any:
        return await self._post("/chat/completions", {
            "model": model or self.default_model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }, "Chat completion")


def _analysis_status(result: Any) -> str:
    if not isinstance(result, dict):
        return ""
    return str(result.get("status", "")).lower()


def _raise_if_failed(result: Any, endpoint: str) -> None:
    status = _analysis_status(result)
    if status in _ANALYSIS_FAILED:
        raise UpstreamAPIError(
            f"Document analysis failed: {result.get('error') or status}",
            PROVIDER, details=result, context=ErrorContext(endpoint=endpoint),
        )


def _pending_analysis_id(started: Any) -> Any:
    """chat_response_id of an analysis that has not reached a terminal status."""
    if not isinstance(started, dict):
        return None
    response_id = started.get("chat_response_id")
    if response_id is None:
        return None
    status = _analysis_status(started)
    if status in _ANALYSIS_DONE:
        return None
    return response_id
