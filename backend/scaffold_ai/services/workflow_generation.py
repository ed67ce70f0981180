"""Workflow Generation - turn descriptions into executable code and code back into descriptions.

Invariants:
    - generate_workflow always returns either {executable_code, tool_config}
      or {raw_response, note} (unparsable JSON is not an error)
    - Empty completions raise ExternalServiceError
    - Transport failures and unreadable answers are reported as "Failed to ..." with the
      underlying message

Design Decisions:
    - Prompts are module-level templates filled with str.format (static text, dynamic slots)
"""

import json
import logging

import httpx

from scaffold_ai.core.errors import ExternalServiceError
from scaffold_ai.infrastructure.openai_client import OpenAIClient, first_message_content

logger = logging.getLogger(__name__)

_GENERATION_TEMPERATURE = 0.3
_GENERATION_MAX_TOKENS = 2000
_DESCRIPTION_MAX_TOKENS = 1000

_GENERATION_SYSTEM = (
    "You are an expert in workflow automation and API integration. Generate "
    "both executable code and tool configurations in valid JSON format."
)

_GENERATION_PROMPT = """You are an expert in workflow automation and Paradigm's third-party tool integration. Given the following workflow description, generate TWO things:

1. EXECUTABLE CODE: JavaScript/TypeScript code that will execute the workflow by calling the execute-workflow API endpoint
2. PARADIGM TOOL CONFIG: A JSON configuration for Paradigm's third-party tool interface

Workflow Description: "{description}"

Available Paradigm API endpoints (from https://paradigm.lighton.ai/api/schema/swagger-ui/#/):
- Document Search: POST /docsearch
- Web Search: POST /websearch
- Chat Completions: POST /chat/completions
- And other endpoints available in the Swagger documentation

Your response should be a JSON object with two fields:
1. "executable_code": JavaScript/TypeScript code that calls the execute-workflow API
2. "tool_config": JSON configuration for Paradigm third-party tool

The executable code should:
- Parse the workflow description into appropriate API calls
- Handle the workflow execution logic
- Return structured results

The tool config should include:
- name: Descriptive name for the tool
- description: Detailed description for tool routing
- http_method: POST
- url: {tool_url}
- headers: Authorization header for API key
- body_params: Parameters needed for the workflow

Generate both the executable code and the Paradigm tool configuration in valid JSON format."""

_DESCRIPTION_SYSTEM = (
    "You are an expert at explaining technical workflows in simple terms. "
    "Return ONLY the workflow description without any markdown formatting "
    "or explanatory text."
)

_DESCRIPTION_PROMPT = """You are an expert in workflow automation and the Paradigm AI platform. I have generated executable code for a workflow, and I need you to translate it into a clear, step-by-step description that explicitly mentions the Paradigm tools being used.

Here is the executable code:
```javascript
{code}
```

Please analyze this code and create a clear, concise workflow description that:

1. **Explains each step in plain English**
2. **Explicitly mentions Paradigm tools** (DocSearch, Document Analysis, Image Analysis, Chat Completion, etc.)
3. **Describes the flow of data** between steps
4. **Mentions any specific parameters or configurations**
5. **Explains the expected output**

Focus on making it easy for a non-technical person to understand what the workflow does.

Available Paradigm tools to reference:
- **DocSearch** (Document Search): Searches through documents with a query
- **Document Analysis**: Analyzes specific documents with a query
- **Image Analysis**: Analyzes images in documents
- **Chat Completion**: Generates responses using the AI model
- **Query**: Retrieves document chunks based on a query
- **Multi-Sentence Workflow**: Splits input into sentences and processes each separately
- **Multi-Step Workflow**: Executes multiple steps in sequence

Return ONLY the workflow description in clear, numbered steps. Do not include any markdown formatting, code blocks, or explanatory text."""


def build_generation_prompt(description: str, tool_url: str) -> str:
    return _GENERATION_PROMPT.format(description=description, tool_url=tool_url)


def build_description_prompt(executable_code: str) -> str:
    return _DESCRIPTION_PROMPT.format(code=executable_code)


def parse_generation(content: str) -> dict:
    """Split the model answer into code + tool config, or hand it back raw."""
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        logger.info("Failed to parse as JSON, returning raw content")
        parsed = None
    if not isinstance(parsed, dict):
        return {
            "raw_response": content,
            "note": "Response could not be parsed as JSON. Please review and format manually.",
        }
    return {
        "executable_code": parsed.get("executable_code"),
        "tool_config": parsed.get("tool_config"),
    }


async def generate_workflow(
    openai: OpenAIClient, description: str, *, model: str, tool_url: str,
) -> dict:
    """Ask the model for executable code plus a Paradigm tool config."""
    try:
        data = await openai.chat_completion(
            [
                {"role": "system", "content": _GENERATION_SYSTEM},
                {"role": "user", "content": build_generation_prompt(description, tool_url)},
            ],
            model=model,
            temperature=_GENERATION_TEMPERATURE,
            max_tokens=_GENERATION_MAX_TOKENS,
        )
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Error calling OpenAI: {e}", exc_info=True)
        raise ExternalServiceError("Failed to call OpenAI API", details=str(e)) from e

    content = first_message_content(data)
    if not content:
        raise ExternalServiceError("No content generated from OpenAI")

    logger.info(f"Generated content length: {len(content)}")
    return parse_generation(content)


async def describe_workflow(
    openai: OpenAIClient, executable_code: str, *, model: str,
) -> str:
    """Plain-language, numbered description of generated code."""
    logger.info(f"Generating workflow description for code length: {len(executable_code)}")
    try:
        data = await openai.chat_completion(
            [
                {"role": "system", "content": _DESCRIPTION_SYSTEM},
                {"role": "user", "content": build_description_prompt(executable_code)},
            ],
            model=model,
            temperature=_GENERATION_TEMPERATURE,
            max_tokens=_DESCRIPTION_MAX_TOKENS,
        )
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Error generating workflow description: {e}", exc_info=True)
        raise ExternalServiceError(
            "Failed to generate workflow description", details=str(e),
        ) from e

    description = first_message_content(data)
    if not description:
        raise ExternalServiceError("No description generated from OpenAI")
    return description.strip()
