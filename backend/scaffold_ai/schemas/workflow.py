"""Workflow Schemas - Pydantic models for request bodies at the API boundary.

Invariants:
    - ExecuteWorkflowRequest.parameters may arrive as an object or as a JSON string
    - Text fields the handlers check accept any JSON value here; a missing or non-string
      value is reported by the handler in its own wording, after the configuration check
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ExecuteWorkflowRequest(BaseModel):
    """Execution request: workflow_type plus (possibly stringified) parameters."""
    model_config = ConfigDict(extra="ignore")

    workflow_type: str | None = None
    parameters: dict[str, Any] | list[Any] | str | None = None


class ExecuteWorkflowCodeRequest(BaseModel):
    """Generated code to parse and execute in one call."""
    executable_code: Any = Field(None, alias="executableCode")
    user_input: str | None = Field(None, alias="userInput")

    model_config = ConfigDict(populate_by_name=True)


class ParseWorkflowCodeRequest(BaseModel):
    code: str = Field(min_length=1)


class GenerateWorkflowRequest(BaseModel):
    description: Any = None


class DescribeWorkflowRequest(BaseModel):
    executable_code: Any = Field(None, alias="executableCode")

    model_config = ConfigDict(populate_by_name=True)


class TemplateRequest(BaseModel):
    description: str = Field(min_length=1, max_length=10_000)
