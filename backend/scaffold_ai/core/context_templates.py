"""Context Templates - substitute earlier step results into later step parameters.

Invariants:
    - Pure: the input step and context are never mutated
    - {{name}} resolves context[name]; {{name.key.0}} walks dict keys and list indexes
    - A string that is exactly one token receives the raw value (dicts/lists kept)
    - Embedded tokens are stringified (JSON for non-strings)
    - Tokens that do not resolve are left as written
"""

import json
import re
from typing import Any

_TOKEN = re.compile(r"\{\{\s*([\w-]+(?:\.[\w-]+)*)\s*\}\}")

_MISSING = object()


def _lookup(context: dict, path: str) -> Any:
    current: Any = context
    for part in path.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return _MISSING
    return current


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def render_value(value: Any, context: dict) -> Any:
    """Resolve {{tokens}} inside any JSON-like value."""
    if isinstance(value, str):
        whole = _TOKEN.fullmatch(value.strip())
        if whole:
            found = _lookup(context, whole.group(1))
            return value if found is _MISSING else found

        def _replace(match: re.Match) -> str:
            found = _lookup(context, match.group(1))
            return match.group(0) if found is _MISSING else _as_text(found)

        return _TOKEN.sub(_replace, value)
    if isinstance(value, dict):
        return {k: render_value(v, context) for k, v in value.items()}
    if isinstance(value, list):
        return [render_value(v, context) for v in value]
    return value


def render_step(step: dict, context: dict) -> dict:
    """Copy of a step with context tokens resolved in every parameter."""
    return render_value(step, context)
