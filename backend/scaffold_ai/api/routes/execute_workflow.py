"""Workflow Execution - run workflows against Paradigm and wrap results in the response envelope.

Invariants:
    - Parameter parsing (400) happens before the Paradigm key check (500)
    - Success envelope: success, result, explanation, workflow_type, executed_at
    - Any failure while executing becomes 500 {"error": "Failed to execute workflow", "details": ...}
"""

import json
import logging
from typing import Any

import httpx
from fastapi import APIRouter, Depends

from scaffold_ai.api.dependencies import build_workflow_executor, get_http_client
from scaffold_ai.config import Settings, get_settings
from scaffold_ai.core.clock import utc_timestamp
from scaffold_ai.core.errors import (
    ErrorContext,
    InvalidRequestError,
    ScaffoldError,
    WorkflowExecutionError,
)
from scaffold_ai.core.parse_workflow_code import (
    ParsedWorkflow,
    check_parsed_workflow,
    parse_workflow_code,
)
from scaffold_ai.schemas.workflow import (
    ExecuteWorkflowCodeRequest,
    ExecuteWorkflowRequest,
    ParseWorkflowCodeRequest,
)
from scaffold_ai.services.workflow_executor import (
    MULTI_SENTENCE_WORKFLOW,
    WorkflowExecutor,
    error_text,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["workflows"])


def parse_parameters(raw: Any) -> dict:
    """Accept parameters as an object or as a JSON-encoded string."""
    parsed = raw
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            raise InvalidRequestError(
                "Invalid parameters: could not parse JSON string.",
            )
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise InvalidRequestError("Invalid parameters: expected a JSON object.")
    return parsed


async def run_workflow(
    executor: WorkflowExecutor, workflow_type: str | None, parameters: dict,
) -> dict:
    logger.info(
        "Executing workflow", extra={"workflow_type": workflow_type},
    )
    logger.debug(f"Parameters: {json.dumps(parameters, indent=2, default=str)}")
    try:
        outcome = await executor.run(workflow_type, parameters)
    except ScaffoldError as e:
        e.context.workflow_type = e.context.workflow_type or workflow_type
        raise
    except Exception as e:
        logger.error(f"Error executing workflow: {e}", exc_info=True)
        raise WorkflowExecutionError(
            error_text(e), ErrorContext(workflow_type=workflow_type),
        ) from e

    return {
        "success": True,
        "result": outcome["result"],
        "explanation": outcome["explanation"],
        "workflow_type": workflow_type,
        "executed_at": utc_timestamp(),
    }


@router.post("/execute-workflow")
async def execute_workflow(
    body: ExecuteWorkflowRequest,
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """Execute a workflow described by workflow_type + parameters."""
    parameters = parse_parameters(body.parameters)
    executor = build_workflow_executor(http_client, settings)
    return await run_workflow(executor, body.workflow_type, parameters)


def _fill_user_input(parsed: ParsedWorkflow, user_input: str | None) -> dict:
    """Input-driven code leaves the value empty; the request supplies it."""
    parameters = dict(parsed.parameters)
    if not user_input:
        return parameters
    if parsed.workflow_type == MULTI_SENTENCE_WORKFLOW and not parameters.get("user_input"):
        parameters["user_input"] = user_input
    elif parsed.workflow_type == "document_search" and not parameters.get("query"):
        parameters["query"] = user_input
    return parameters


@router.post("/execute-workflow-code")
async def execute_workflow_code(
    body: ExecuteWorkflowCodeRequest,
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """Parse generated code and execute the workflow it describes."""
    if not body.executable_code or not isinstance(body.executable_code, str):
        raise InvalidRequestError("Missing or invalid executable code.")

    parsed = parse_workflow_code(body.executable_code)
    validation = check_parsed_workflow(parsed)
    if not validation.is_valid:
        raise InvalidRequestError(
            f"Invalid workflow: {validation.error}", details=parsed.to_dict(),
        )

    parameters = _fill_user_input(parsed, body.user_input)
    executor = build_workflow_executor(http_client, settings)
    return await run_workflow(executor, parsed.workflow_type, parameters)


@router.post("/parse-workflow-code")
async def parse_code(body: ParseWorkflowCodeRequest):
    """Show what the parser extracts from generated code, without executing it."""
    parsed = parse_workflow_code(body.code)
    return {
        "parsed": parsed.to_dict(),
        "validation": check_parsed_workflow(parsed).to_dict(),
    }
