"""Paradigm Client - tests for request shape, error mapping and analysis polling.

Tests cover:
    - Bearer auth header, default model and tool, None fields omitted
    - Non-2xx -> UpstreamAPIError with "<Operation> failed: <status> <reason>"
    - sentence_search sends user_instructions, error carries upstream reason
    - Document analysis: immediate result, poll until complete, timeout
    - A failed status raises the same error on start and while polling
    - Errors record the upstream endpoint in their context
"""

import json

import httpx
import pytest
from respx import MockRouter

from scaffold_ai.core.errors import UpstreamAPIError
from tests.fakes import PARADIGM_BASE


@pytest.mark.asyncio
async def test_document_search_request_shape(paradigm_client, respx_mock: MockRouter):
    route = respx_mock.post(f"{PARADIGM_BASE}/chat/document-search").mock(
        return_value=httpx.Response(200, json={"answer": "42"}),
    )

    result = await paradigm_client.document_search("meaning", file_ids=[3])

    assert result == {"answer": "42"}
    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer paradigm-test-fake-key"
    assert json.loads(request.content) == {
        "query": "meaning",
        "model": "alfred-4.2",
        "file_ids": [3],
        "tool": "DocumentSearch",
    }


@pytest.mark.asyncio
async def test_non_success_raises_upstream_error(paradigm_client, respx_mock: MockRouter):
    respx_mock.post(f"{PARADIGM_BASE}/query").mock(
        return_value=httpx.Response(503),
    )

    with pytest.raises(UpstreamAPIError) as exc_info:
        await paradigm_client.query("q")

    assert exc_info.value.message == "Query failed: 503 Service Unavailable"
    assert exc_info.value.upstream_status == 503
    assert exc_info.value.provider == "paradigm"


@pytest.mark.asyncio
async def test_sentence_search_sends_instructions(paradigm_client, respx_mock: MockRouter):
    route = respx_mock.post(f"{PARADIGM_BASE}/chat/document-search").mock(
        return_value=httpx.Response(200, json={"content": "X is a letter"}),
    )

    await paradigm_client.sentence_search("What is X?")

    body = json.loads(route.calls.last.request.content)
    assert body["query"] == "What is X?"
    assert "directly: What is X?." in body["user_instructions"]


@pytest.mark.asyncio
async def test_sentence_search_error_includes_upstream_reason(
    paradigm_client, respx_mock: MockRouter,
):
    respx_mock.post(f"{PARADIGM_BASE}/chat/document-search").mock(
        return_value=httpx.Response(400, json={"error": "empty workspace"}),
    )

    with pytest.raises(UpstreamAPIError) as exc_info:
        await paradigm_client.sentence_search("Who?")

    assert exc_info.value.message == "Document search failed: Bad Request - empty workspace"


@pytest.mark.asyncio
async def test_analysis_returns_immediate_result(paradigm_client, respx_mock: MockRouter):
    respx_mock.post(f"{PARADIGM_BASE}/chat/document-analysis").mock(
        return_value=httpx.Response(200, json={"result": "done inline"}),
    )

    result = await paradigm_client.document_analysis("q", [1, 2])

    assert result == {"result": "done inline"}


@pytest.mark.asyncio
async def test_analysis_polls_until_complete(paradigm_client, respx_mock: MockRouter):
    respx_mock.post(f"{PARADIGM_BASE}/chat/document-analysis").mock(
        return_value=httpx.Response(
            200, json={"chat_response_id": 77, "status": "pending"},
        ),
    )
    poll = respx_mock.get(f"{PARADIGM_BASE}/chat/document-analysis/77").mock(
        side_effect=[
            httpx.Response(200, json={"status": "processing"}),
            httpx.Response(200, json={"status": "completed", "result": "ok"}),
        ],
    )

    result = await paradigm_client.document_analysis("q", [1])

    assert result == {"status": "completed", "result": "ok"}
    assert poll.call_count == 2


@pytest.mark.asyncio
async def test_analysis_failed_status_raises(paradigm_client, respx_mock: MockRouter):
    respx_mock.post(f"{PARADIGM_BASE}/chat/document-analysis").mock(
        return_value=httpx.Response(200, json={"chat_response_id": 5}),
    )
    respx_mock.get(f"{PARADIGM_BASE}/chat/document-analysis/5").mock(
        return_value=httpx.Response(200, json={"status": "failed", "error": "corrupt pdf"}),
    )

    with pytest.raises(UpstreamAPIError) as exc_info:
        await paradigm_client.document_analysis("q", [1])

    assert exc_info.value.message == "Document analysis failed: corrupt pdf"


@pytest.mark.asyncio
async def test_analysis_times_out_after_max_attempts(
    paradigm_client, respx_mock: MockRouter,
):
    respx_mock.post(f"{PARADIGM_BASE}/chat/document-analysis").mock(
        return_value=httpx.Response(200, json={"chat_response_id": 9}),
    )
    poll = respx_mock.get(f"{PARADIGM_BASE}/chat/document-analysis/9").mock(
        return_value=httpx.Response(200, json={"status": "processing"}),
    )

    with pytest.raises(UpstreamAPIError) as exc_info:
        await paradigm_client.document_analysis("q", [1])

    assert exc_info.value.message == "Document analysis timed out after 3 attempts"
    assert poll.call_count == 3


@pytest.mark.asyncio
async def test_chat_completion_uses_default_model(paradigm_client, respx_mock: MockRouter):
    route = respx_mock.post(f"{PARADIGM_BASE}/chat/completions").mock(
        return_value=httpx.Response(200, json={"choices": []}),
    )

    await paradigm_client.chat_completion([{"role": "user", "content": "hi"}])

    body = json.loads(route.calls.last.request.content)
    assert body == {
        "model": "alfred-4.2",
        "messages": [{"role": "user", "content": "hi"}],
    }


@pytest.mark.asyncio
async def test_analysis_failed_on_start_raises(paradigm_client, respx_mock: MockRouter):
    respx_mock.post(f"{PARADIGM_BASE}/chat/document-analysis").mock(
        return_value=httpx.Response(
            200, json={"chat_response_id": 5, "status": "failed", "error": "corrupt pdf"},
        ),
    )

    with pytest.raises(UpstreamAPIError) as exc_info:
        await paradigm_client.document_analysis("q", [1])

    assert exc_info.value.message == "Document analysis failed: corrupt pdf"
    assert exc_info.value.context.endpoint == f"{PARADIGM_BASE}/chat/document-analysis"


@pytest.mark.asyncio
async def test_error_status_without_message_on_start(paradigm_client, respx_mock: MockRouter):
    respx_mock.post(f"{PARADIGM_BASE}/chat/document-analysis").mock(
        return_value=httpx.Response(200, json={"status": "ERROR"}),
    )

    with pytest.raises(UpstreamAPIError) as exc_info:
        await paradigm_client.document_analysis("q", [1])

    assert exc_info.value.message == "Document analysis failed: error"


@pytest.mark.asyncio
async def test_non_success_records_endpoint(paradigm_client, respx_mock: MockRouter):
    respx_mock.post(f"{PARADIGM_BASE}/chat/image-analysis").mock(
        return_value=httpx.Response(401),
    )

    with pytest.raises(UpstreamAPIError) as exc_info:
        await paradigm_client.image_analysis("q", [1])

    assert exc_info.value.message == "Image analysis failed: 401 Unauthorized"
    assert exc_info.value.context.endpoint == f"{PARADIGM_BASE}/chat/image-analysis"
