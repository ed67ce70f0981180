"""Generation Routes - tests for code generation, description and template fill endpoints.

Tests cover:
    - Key check precedes body checks (500 before 400)
    - Generated code and tool config returned from the model answer
    - Upstream OpenAI errors -> 500 with upstream status and body
    - A 2xx answer that is not JSON -> 500 "Failed to call OpenAI API"
    - Non-string description or code -> 400 from the handler, after the key check
    - Description endpoint wraps the text in workflow_description
    - Template endpoint works without an OpenAI key for direct matches
"""

import json

import httpx
import pytest
from respx import MockRouter

from tests.fakes import OPENAI_BASE, completion

COMPLETIONS_URL = f"{OPENAI_BASE}/chat/completions"


@pytest.mark.asyncio
async def test_generate_without_key_is_500_even_without_description(
    client, override_settings,
):
    override_settings(openai_api_key="")
    resp = await client.post("/api/generate-workflow", json={})
    assert resp.status_code == 500
    assert resp.json()["error"] == "OpenAI API key not set."


@pytest.mark.asyncio
async def test_generate_missing_description(client):
    resp = await client.post("/api/generate-workflow", json={})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing or invalid description."


@pytest.mark.asyncio
async def test_generate_workflow(client, respx_mock: MockRouter):
    answer = {"executable_code": "executeWorkflow(userInput)", "tool_config": {"name": "QA"}}
    route = respx_mock.post(COMPLETIONS_URL).mock(
        return_value=httpx.Response(200, json=completion(json.dumps(answer))),
    )

    resp = await client.post("/api/generate-workflow", json={
        "description": "Answer each question from the documents",
    })

    assert resp.status_code == 200
    assert resp.json() == answer
    body = json.loads(route.calls.last.request.content)
    assert body["model"] == "gpt-4"


@pytest.mark.asyncio
async def test_generate_upstream_error(client, respx_mock: MockRouter):
    error_body = {"error": {"message": "You exceeded your current quota"}}
    respx_mock.post(COMPLETIONS_URL).mock(
        return_value=httpx.Response(429, json=error_body),
    )

    resp = await client.post("/api/generate-workflow", json={"description": "x"})

    assert resp.status_code == 500
    data = resp.json()
    assert data["error"] == "OpenAI API error: You exceeded your current quota"
    assert data["status"] == 429
    assert data["details"] == error_body


@pytest.mark.asyncio
async def test_generate_description(client, respx_mock: MockRouter):
    respx_mock.post(COMPLETIONS_URL).mock(
        return_value=httpx.Response(200, json=completion("1. Search with DocSearch. ")),
    )

    resp = await client.post("/api/generate-workflow-description", json={
        "executableCode": "executeWorkflow(query)",
    })

    assert resp.status_code == 200
    assert resp.json() == {"workflow_description": "1. Search with DocSearch."}


@pytest.mark.asyncio
async def test_generate_description_missing_code(client):
    resp = await client.post("/api/generate-workflow-description", json={})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing or invalid executable code."


@pytest.mark.asyncio
async def test_template_generation_without_openai(client, override_settings):
    override_settings(openai_api_key="")
    resp = await client.post("/api/generate-workflow/template", json={
        "description": "Search documents for customer complaints",
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["confidence"] == 0.9
    assert data["template"]["id"] == "document_search"


@pytest.mark.asyncio
async def test_template_generation_rejects_empty_description(client):
    resp = await client.post("/api/generate-workflow/template", json={"description": ""})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request data"


@pytest.mark.asyncio
async def test_generate_html_success_body(client, respx_mock: MockRouter):
    respx_mock.post(COMPLETIONS_URL).mock(
        return_value=httpx.Response(200, text="<html>gateway</html>"),
    )

    resp = await client.post("/api/generate-workflow", json={"description": "x"})

    assert resp.status_code == 500
    data = resp.json()
    assert data["error"] == "Failed to call OpenAI API"
    assert "Expecting value" in data["details"]


@pytest.mark.asyncio
async def test_generate_numeric_description(client):
    resp = await client.post("/api/generate-workflow", json={"description": 123})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing or invalid description."


@pytest.mark.asyncio
async def test_generate_numeric_description_without_key(client, override_settings):
    override_settings(openai_api_key="")
    resp = await client.post("/api/generate-workflow", json={"description": 123})
    assert resp.status_code == 500
    assert resp.json()["error"] == "OpenAI API key not set."


@pytest.mark.asyncio
async def test_generate_description_numeric_code(client):
    resp = await client.post("/api/generate-workflow-description", json={
        "executableCode": 42,
    })
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing or invalid executable code."
