"""Workflow Templates - predefined workflow skeletons matched against free-form descriptions.

Invariants:
    - Pure functions: no IO, no async
    - Template skeletons are never mutated (customize_template deep-copies)
    - Unknown {placeholder} tokens survive customization unchanged
    - find_best_template returns None when no template scores above 0

Design Decisions:
    - Keyword scoring is case-insensitive substring matching (predictable, testable)
    - A string that is exactly one {token} receives the raw parameter value,
      so list parameters such as document_ids stay lists
"""

import copy
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

_PLACEHOLDER = re.compile(r"\{(\w+)\}")
_WHOLE_PLACEHOLDER = re.compile(r"^\{(\w+)\}$")

_MAX_SUGGESTIONS = 3


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class WorkflowTemplate:
    """One proven workflow pattern that can be filled from a description."""
    id: str
    name: str
    description: str
    pattern: str
    template: dict
    required_params: list[str]
    optional_params: list[str]
    validate: Callable[[dict], ValidationResult]
    examples: list[str]

    def summary(self) -> dict:
        """Serializable view (the validator is not JSON)."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "pattern": self.pattern,
            "required_params": list(self.required_params),
            "optional_params": list(self.optional_params),
            "examples": list(self.examples),
        }


def _validate_document_search(params: dict) -> ValidationResult:
    errors = []
    if not params.get("query") or not isinstance(params["query"], str):
        errors.append("Query parameter is required and must be a string")
    return ValidationResult(not errors, errors)


def _validate_document_analysis(params: dict) -> ValidationResult:
    errors = []
    if not params.get("query"):
        errors.append("Query parameter is required")
    if not isinstance(params.get("document_ids"), list):
        errors.append("Document IDs array is required")
    return ValidationResult(not errors, errors)


def _validate_multi_step_research(params: dict) -> ValidationResult:
    errors = []
    if not params.get("search_query"):
        errors.append("Search query is required")
    if not params.get("analysis_query"):
        errors.append("Analysis query is required")
    return ValidationResult(not errors, errors)


def _validate_chat_completion(params: dict) -> ValidationResult:
    errors = []
    if not params.get("user_message"):
        errors.append("User message is required")
    return ValidationResult(not errors, errors)


WORKFLOW_TEMPLATES: tuple[WorkflowTemplate, ...] = (
    WorkflowTemplate(
        id="document_search",
        name="Document Search",
        description="Search through documents with a query",
        pattern="search documents for {query}",
        template={
            "workflow_type": "document_search",
            "parameters": {
                "query": "{query}",
                "model": "alfred-4.2",
                "tool": "DocumentSearch",
            },
        },
        required_params=["query"],
        optional_params=["model", "workspace_ids", "file_ids"],
        validate=_validate_document_search,
        examples=[
            "Search documents for customer complaints",
            "Find information about AI workflows in our documents",
            "Look for sales data in the uploaded files",
        ],
    ),
    WorkflowTemplate(
        id="document_analysis",
        name="Document Analysis",
        description="Analyze specific documents with a query",
        pattern="analyze {documents} for {query}",
        template={
            "workflow_type": "document_analysis",
            "parameters": {
                "query": "{query}",
                "document_ids": "{document_ids}",
                "model": "alfred-4.2",
            },
        },
        required_params=["query", "document_ids"],
        optional_params=["model"],
        validate=_validate_document_analysis,
        examples=[
            "Analyze the quarterly report for financial trends",
            "Review the contract documents for key terms",
            "Examine the research papers for methodology",
        ],
    ),
    WorkflowTemplate(
        id="multi_step_research",
        name="Multi-Step Research",
        description="Search documents and then analyze the results",
        pattern="research {topic} by searching documents and analyzing findings",
        template={
            "workflow_type": "multi_step_workflow",
            "parameters": {
                "steps": [
                    {
                        "type": "document_search",
                        "query": "{search_query}",
                        "model": "alfred-4.2",
                    },
                    {
                        "type": "document_analysis",
                        "query": "{analysis_query}",
                        "document_ids": "{found_document_ids}",
                        "model": "alfred-4.2",
                    },
                ],
            },
        },
        required_params=["search_query", "analysis_query"],
        optional_params=["model"],
        validate=_validate_multi_step_research,
        examples=[
            "Research AI automation by searching documents and analyzing the findings",
            "Find information about customer feedback and then analyze the patterns",
            "Search for technical documentation and analyze the implementation details",
        ],
    ),
    WorkflowTemplate(
        id="chat_completion",
        name="Chat Completion",
        description="Generate a response using chat completion",
        pattern="generate a response about {topic}",
        template={
            "workflow_type": "chat_completion",
            "parameters": {
                "messages": [{"role": "user", "content": "{user_message}"}],
                "model": "alfred-4.2",
                "temperature": 0.7,
            },
        },
        required_params=["user_message"],
        optional_params=["model", "temperature"],
        validate=_validate_chat_completion,
        examples=[
            "Generate a response about AI workflow automation",
            "Create a summary of the key points",
            "Explain the benefits of process automation",
        ],
    ),
)


def get_template(template_id: str) -> WorkflowTemplate | None:
    return next((t for t in WORKFLOW_TEMPLATES if t.id == template_id), None)


# ─── Scoring ─────────────────────────────────────────────────────

def _pattern_words_in(template: WorkflowTemplate, description: str) -> list[str]:
    return [w for w in template.pattern.lower().split(" ") if w in description]


def _shared_word_count(example: str, description: str) -> int:
    return sum(1 for w in example.lower().split(" ") if w in description)


def _score_for_best_match(template: WorkflowTemplate, description: str) -> int:
    score = len(_pattern_words_in(template, description))
    for example in template.examples:
        if _shared_word_count(example, description) > 2:
            score += 2
    return score


def _score_for_suggestion(template: WorkflowTemplate, description: str) -> int:
    score = len(_pattern_words_in(template, description))
    for example in template.examples:
        if _shared_word_count(example, description) > 1:
            score += 1
    return score


def find_best_template(user_description: str) -> WorkflowTemplate | None:
    """Highest-scoring template for the description, None if nothing matched."""
    description = user_description.lower()
    scored = [(t, _score_for_best_match(t, description)) for t in WORKFLOW_TEMPLATES]
    # stable sort: ties keep catalog order
    scored.sort(key=lambda item: item[1], reverse=True)
    best, score = scored[0]
    return best if score > 0 else None


def get_template_suggestions(user_description: str) -> list[WorkflowTemplate]:
    """Up to three templates with a positive suggestion score, best first."""
    description = user_description.lower()
    scored = [
        (t, _score_for_suggestion(t, description)) for t in WORKFLOW_TEMPLATES
    ]
    scored = [item for item in scored if item[1] > 0]
    scored.sort(key=lambda item: item[1], reverse=True)
    return [t for t, _ in scored[:_MAX_SUGGESTIONS]]


def explain_template_choice(template: WorkflowTemplate, user_description: str) -> str:
    """Human-readable reason a template was picked."""
    description = user_description.lower()
    reasons = []

    matched = _pattern_words_in(template, description)
    if matched:
        reasons.append(f"Matched keywords: {', '.join(matched)}")

    similar = [
        ex for ex in template.examples
        if _shared_word_count(ex, description) > 1
    ]
    if similar:
        reasons.append(f"Similar to examples: {', '.join(similar[:2])}")

    return f'Chose "{template.name}" template because: {"; ".join(reasons)}'


# ─── Extraction & customization ──────────────────────────────────

_QUERY_RE = re.compile(r"(?:for|about|regarding)\s+([^.,]+)", re.IGNORECASE)
_SEARCH_RE = re.compile(r"(?:search|find|look for)\s+([^.,]+)", re.IGNORECASE)
_ANALYSIS_RE = re.compile(r"(?:analyze|examine|review)\s+([^.,]+)", re.IGNORECASE)


def extract_parameters(template: WorkflowTemplate, user_description: str) -> dict:
    """Pull the template's required parameters out of a description."""
    params: dict[str, Any] = {}
    required = template.required_params

    if "query" in required:
        match = _QUERY_RE.search(user_description)
        if match:
            params["query"] = match.group(1).strip()

    if "search_query" in required:
        match = _SEARCH_RE.search(user_description)
        if match:
            params["search_query"] = match.group(1).strip()

    if "analysis_query" in required:
        match = _ANALYSIS_RE.search(user_description)
        if match:
            params["analysis_query"] = match.group(1).strip()

    if "user_message" in required:
        params["user_message"] = user_description

    return params


def _fill(value: Any, params: dict) -> Any:
    if isinstance(value, str):
        whole = _WHOLE_PLACEHOLDER.match(value)
        if whole and params.get(whole.group(1)):
            return params[whole.group(1)]

        def _replace(match: re.Match) -> str:
            replacement = params.get(match.group(1))
            return str(replacement) if replacement else match.group(0)

        return _PLACEHOLDER.sub(_replace, value)
    if isinstance(value, dict):
        return {k: _fill(v, params) for k, v in value.items()}
    if isinstance(value, list):
        return [_fill(v, params) for v in value]
    return value


def customize_template(template: WorkflowTemplate, params: dict) -> dict:
    """Copy of the template skeleton with {placeholders} filled from params."""
    return _fill(copy.deepcopy(template.template), params)
