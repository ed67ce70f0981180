"""Workflow Code Parser - best-effort extraction of workflow parameters from generated code.

Invariants:
    - Pure function: no IO, never evaluates the code it reads
    - Always returns a ParsedWorkflow (never raises); failures set is_valid=False + error
    - Patterns are tried in a fixed order; the first match wins
    - Code with several workflow_type entries is read as a multi-step workflow first

Design Decisions:
    - JS object literals are loosened into JSON with regex rewrites
      (quote keys, normalize quotes, drop trailing commas, bare identifiers -> "")
    - Variable references carry no value at parse time, so they become empty strings
"""

import json
import logging
import re
from dataclasses import asdict, dataclass
from typing import Any

logger = logging.getLogger(__name__)

SUPPORTED_WORKFLOW_TYPES = frozenset({
    "document_search",
    "document_analysis",
    "image_analysis",
    "query",
    "chat_completion",
    "multi_sentence_workflow",
    "multi_step_workflow",
})

# Object literal with at most one level of nested braces
_OBJECT = r"(\{[^}]*(?:\{[^}]*\}[^}]*)*\})"
_QUOTED = r"['\"`]([^'\"`]+)['\"`]"

_WORKFLOW_TYPE_RE = re.compile(rf"workflow_type:\s*{_QUOTED}")
_STRINGIFIED_CALL_RE = re.compile(
    rf"JSON\.stringify\(\s*\{{\s*workflow_type:\s*{_QUOTED}\s*,\s*"
    rf"parameters:\s*JSON\.stringify\(\s*{_OBJECT}\s*\)\s*\}}\s*\)",
)
_OBJECT_LITERAL_RE = re.compile(
    rf"workflow_type:\s*{_QUOTED}\s*,\s*parameters:\s*{_OBJECT}",
)
_STEP_CALL_RE = re.compile(
    rf"workflow_type:\s*{_QUOTED}\s*,\s*"
    rf"parameters:\s*JSON\.stringify\(\s*{_OBJECT}\s*\)",
)
_EXECUTE_LITERAL_RE = re.compile(rf"executeWorkflow\(\s*{_QUOTED}\s*\)")
_STEPS_ARRAY_RE = re.compile(r"steps:\s*\[([^\]]+)\]")
_QUERY_RE = re.compile(rf"query:\s*{_QUOTED}")
_EXECUTE_USER_INPUT_RE = re.compile(r"executeWorkflow\(\s*userInput\s*\)")
_EXECUTE_QUERY_RE = re.compile(r"executeWorkflow\(\s*query\s*\)")

_UNQUOTED_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_$][\w$]*)\s*:")
_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
_BARE_IDENTIFIER_RE = re.compile(
    r":\s*(?!(?:true|false|null)\b)[A-Za-z_$][\w$]*(?=\s*[,}])",
)


@dataclass
class ParsedWorkflow:
    workflow_type: str
    parameters: Any
    raw_code: str
    is_valid: bool
    error: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CodeValidation:
    is_valid: bool
    error: str | None = None
    workflow_type: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def js_literal_to_json(text: str) -> str:
    """Rewrite a JS object/array literal into (hopefully) valid JSON text."""
    cleaned = _UNQUOTED_KEY_RE.sub(r'\1"\2":', text)
    cleaned = cleaned.replace("'", '"').replace("`", '"')
    cleaned = _TRAILING_COMMA_RE.sub(r"\1", cleaned)
    return _BARE_IDENTIFIER_RE.sub(': ""', cleaned)


def _load_literal(text: str) -> Any:
    return json.loads(js_literal_to_json(text))


def _parse_multi_step(raw_code: str) -> ParsedWorkflow | None:
    if len(_WORKFLOW_TYPE_RE.findall(raw_code)) <= 1:
        return None

    steps = []
    for match in _STEP_CALL_RE.finditer(raw_code):
        try:
            params = _load_literal(match.group(2))
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse step parameters: {e}")
            continue
        steps.append({"type": match.group(1), **params})

    if len(steps) <= 1:
        return None
    return ParsedWorkflow(
        "multi_step_workflow", {"steps": steps}, raw_code, True,
    )


def _parse_typed_call(
    match: re.Match, raw_code: str, what: str,
) -> ParsedWorkflow:
    workflow_type = match.group(1)
    try:
        parameters = _load_literal(match.group(2))
    except json.JSONDecodeError as e:
        return ParsedWorkflow(
            workflow_type, {}, raw_code, False,
            f"Failed to parse parameters {what}: {e}",
        )
    return ParsedWorkflow(workflow_type, parameters, raw_code, True)


def _parse_steps_array(match: re.Match, raw_code: str) -> ParsedWorkflow:
    try:
        steps = _load_literal(f"[{match.group(1)}]")
    except json.JSONDecodeError as e:
        return ParsedWorkflow(
            "multi_step_workflow", {"steps": []}, raw_code, False,
            f"Failed to parse multi-step workflow: {e}",
        )
    return ParsedWorkflow(
        "multi_step_workflow", {"steps": steps}, raw_code, True,
    )


def parse_workflow_code(code: str) -> ParsedWorkflow:
    """Extract workflow_type and parameters from generated executable code."""
    raw_code = code.strip()

    multi_step = _parse_multi_step(raw_code)
    if multi_step:
        return multi_step

    match = _STRINGIFIED_CALL_RE.search(raw_code)
    if match:
        return _parse_typed_call(match, raw_code, "JSON")

    match = _OBJECT_LITERAL_RE.search(raw_code)
    if match:
        return _parse_typed_call(match, raw_code, "object")

    match = _EXECUTE_LITERAL_RE.search(raw_code)
    if match:
        return ParsedWorkflow(
            "multi_sentence_workflow", {"user_input": match.group(1)},
            raw_code, True,
        )

    match = _STEPS_ARRAY_RE.search(raw_code)
    if match:
        return _parse_steps_array(match, raw_code)

    match = _QUERY_RE.search(raw_code)
    if match:
        return ParsedWorkflow(
            "document_search", {"query": match.group(1)}, raw_code, True,
        )

    # Input-driven functions: the value arrives with the request
    if _EXECUTE_USER_INPUT_RE.search(raw_code):
        return ParsedWorkflow(
            "multi_sentence_workflow", {"user_input": ""}, raw_code, True,
        )
    if _EXECUTE_QUERY_RE.search(raw_code):
        return ParsedWorkflow(
            "document_search", {"query": ""}, raw_code, True,
        )

    return ParsedWorkflow(
        "", {}, raw_code, False,
        "Could not extract workflow parameters from the generated code",
    )


def validate_workflow_code(code: str) -> CodeValidation:
    """Parse code and check the workflow type is one we can execute."""
    return check_parsed_workflow(parse_workflow_code(code))


def check_parsed_workflow(parsed: ParsedWorkflow) -> CodeValidation:
    if not parsed.is_valid:
        return CodeValidation(False, parsed.error)

    if parsed.workflow_type not in SUPPORTED_WORKFLOW_TYPES:
        return CodeValidation(
            False,
            f"Unsupported workflow type: {parsed.workflow_type}",
            parsed.workflow_type,
        )

    return CodeValidation(True, workflow_type=parsed.workflow_type)
