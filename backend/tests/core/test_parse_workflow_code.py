"""Workflow Code Parser - tests for parameter extraction from generated code.

Tests cover:
    - js_literal_to_json: unquoted keys, quote styles, trailing commas, bare identifiers
    - JSON.stringify call, object literal, multi-step, steps array patterns
    - executeWorkflow('literal') -> multi-sentence workflow
    - Input-driven functions (userInput / query) -> empty value filled later
    - Unparsable parameters -> is_valid False with the JSON error
    - validate_workflow_code rejects unsupported workflow types
"""

import json

from scaffold_ai.core.parse_workflow_code import (
    js_literal_to_json,
    parse_workflow_code,
    validate_workflow_code,
)

STRINGIFIED = """
const response = await fetch(API_URL, {
  method: 'POST',
  body: JSON.stringify({
    workflow_type: 'document_search',
    parameters: JSON.stringify({ query: 'invoices', model: 'alfred-4.2' })
  })
});
"""

MULTI_STEP = """
const first = await call(JSON.stringify({ workflow_type: 'document_search', parameters: JSON.stringify({ query: 'AI' }) }));
const second = await call(JSON.stringify({ workflow_type: 'chat_completion', parameters: JSON.stringify({ model: 'alfred-4.2' }) }));
"""


# -- js_literal_to_json --------------------------------------------------------

def test_literal_quotes_keys_and_drops_trailing_comma():
    text = "{a: 1, b: 'x', d: true,}"
    assert json.loads(js_literal_to_json(text)) == {"a": 1, "b": "x", "d": True}


def test_literal_bare_identifier_becomes_empty_string():
    text = "{query: userQuery, private: false, scope: null}"
    assert json.loads(js_literal_to_json(text)) == {
        "query": "", "private": False, "scope": None,
    }


def test_literal_backticks_become_double_quotes():
    assert json.loads(js_literal_to_json("{q: `hello`}")) == {"q": "hello"}


# -- parse_workflow_code -------------------------------------------------------

def test_parses_stringified_call():
    parsed = parse_workflow_code(STRINGIFIED)
    assert parsed.is_valid
    assert parsed.workflow_type == "document_search"
    assert parsed.parameters == {"query": "invoices", "model": "alfred-4.2"}
    assert parsed.raw_code == STRINGIFIED.strip()


def test_parses_object_literal_with_variable():
    code = (
        'executeWorkflow({ workflow_type: "document_search", '
        'parameters: { query: userQuery, tool: "DocumentSearch" } })'
    )
    parsed = parse_workflow_code(code)
    assert parsed.is_valid
    assert parsed.parameters == {"query": "", "tool": "DocumentSearch"}


def test_parses_multi_step_calls():
    parsed = parse_workflow_code(MULTI_STEP)
    assert parsed.workflow_type == "multi_step_workflow"
    assert parsed.parameters == {"steps": [
        {"type": "document_search", "query": "AI"},
        {"type": "chat_completion", "model": "alfred-4.2"},
    ]}


def test_literal_execute_call_is_multi_sentence():
    parsed = parse_workflow_code("executeWorkflow('What is X? Who is Y?')")
    assert parsed.workflow_type == "multi_sentence_workflow"
    assert parsed.parameters == {"user_input": "What is X? Who is Y?"}


def test_parses_steps_array():
    code = (
        "const workflow = { steps: [ { type: 'document_search', query: 'AI' }, "
        "{ type: 'query', query: 'ML', n: 3 } ] };"
    )
    parsed = parse_workflow_code(code)
    assert parsed.workflow_type == "multi_step_workflow"
    assert parsed.parameters["steps"][1] == {"type": "query", "query": "ML", "n": 3}


def test_bare_query_is_document_search():
    parsed = parse_workflow_code('const params = { query: "sales data" };')
    assert parsed.workflow_type == "document_search"
    assert parsed.parameters == {"query": "sales data"}


def test_user_input_function_leaves_value_empty():
    code = "async function run(userInput) { return executeWorkflow(userInput); }"
    parsed = parse_workflow_code(code)
    assert parsed.workflow_type == "multi_sentence_workflow"
    assert parsed.parameters == {"user_input": ""}


def test_query_function_is_document_search():
    parsed = parse_workflow_code("const run = (query) => executeWorkflow(query);")
    assert parsed.workflow_type == "document_search"
    assert parsed.parameters == {"query": ""}


def test_unrecognized_code_is_invalid():
    parsed = parse_workflow_code("console.log('hi')")
    assert not parsed.is_valid
    assert parsed.workflow_type == ""
    assert parsed.error == "Could not extract workflow parameters from the generated code"


def test_unparsable_parameters_report_json_error():
    code = "run({ workflow_type: 'document_search', parameters: { query: foo.bar } })"
    parsed = parse_workflow_code(code)
    assert not parsed.is_valid
    assert parsed.workflow_type == "document_search"
    assert parsed.error.startswith("Failed to parse parameters object:")


def test_to_dict_shape():
    data = parse_workflow_code('{ query: "x" }').to_dict()
    assert set(data) == {"workflow_type", "parameters", "raw_code", "is_valid", "error"}


# -- validate_workflow_code ----------------------------------------------------

def test_validation_accepts_supported_type():
    result = validate_workflow_code(STRINGIFIED)
    assert result.is_valid
    assert result.workflow_type == "document_search"


def test_validation_rejects_unsupported_type():
    result = validate_workflow_code(
        "run({ workflow_type: 'web_search', parameters: { query: 'x' } })",
    )
    assert not result.is_valid
    assert result.error == "Unsupported workflow type: web_search"
    assert result.workflow_type == "web_search"


def test_validation_passes_parse_error_through():
    result = validate_workflow_code("nothing here")
    assert not result.is_valid
    assert result.error == "Could not extract workflow parameters from the generated code"
