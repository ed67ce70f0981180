"""Workflow Generation Routes - LLM-backed code generation, description, and template fill.

Invariants:
    - The OpenAI key check (500) runs before body validation (400)
    - Upstream OpenAI failures surface as 500 with the upstream error body in details
"""

import logging

import httpx
from fastapi import APIRouter, Depends

from scaffold_ai.api.dependencies import build_openai_client, get_http_client
from scaffold_ai.config import Settings, get_settings
from scaffold_ai.core.errors import InvalidRequestError
from scaffold_ai.schemas.workflow import (
    DescribeWorkflowRequest,
    GenerateWorkflowRequest,
    TemplateRequest,
)
from scaffold_ai.services.template_generator import TemplateGenerator
from scaffold_ai.services.workflow_generation import describe_workflow, generate_workflow

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["generation"])


@router.post("/generate-workflow")
async def generate_workflow_route(
    body: GenerateWorkflowRequest,
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """Generate executable code and a Paradigm tool config from a description."""
    openai = build_openai_client(http_client, settings)
    if not body.description or not isinstance(body.description, str):
        raise InvalidRequestError("Missing or invalid description.")

    return await generate_workflow(
        openai,
        body.description,
        model=settings.openai_model,
        tool_url=settings.execute_workflow_url,
    )


@router.post("/generate-workflow-description")
async def generate_workflow_description(
    body: DescribeWorkflowRequest,
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """Explain generated code as numbered plain-language steps."""
    openai = build_openai_client(http_client, settings)
    if not body.executable_code or not isinstance(body.executable_code, str):
        raise InvalidRequestError("Missing or invalid executable code.")

    description = await describe_workflow(
        openai, body.executable_code, model=settings.openai_model,
    )
    return {"workflow_description": description}


@router.post("/generate-workflow/template")
async def generate_workflow_from_template(
    body: TemplateRequest,
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """Fill the best-matching template; OpenAI repairs parameters when configured."""
    openai = (
        build_openai_client(http_client, settings)
        if settings.openai_api_key else None
    )
    generator = TemplateGenerator(openai, model=settings.openai_model)
    result = await generator.generate(body.description)
    return result.to_dict()
