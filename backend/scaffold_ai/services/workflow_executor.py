"""Workflow Executor - sequential interpreter over a JSON step list.

Invariants:
    - Steps run strictly in order; each awaits the previous network call
    - A failing step never aborts the loop: its message is recorded and the loop continues
    - Successful results are stored in the context under the step name (or type)
    - Later steps see earlier results through {{name}} tokens (core/context_templates.py)
    - Unknown step kinds and unavailable endpoints become inline explanations
    - A non-object initial context is a request error (400), not a workflow failure

Design Decisions:
    - Explicit alias dict over getattr: every step kind -> handler mapping visible in one place
    - Each handler forwards only the parameter subset its endpoint accepts
"""

import logging
from typing import Any

from scaffold_ai.core.clock import utc_timestamp
from scaffold_ai.core.context_templates import render_step
from scaffold_ai.core.errors import (
    ErrorContext,
    InvalidRequestError,
    ScaffoldError,
    StepSkipped,
    WorkflowExecutionError,
)
from scaffold_ai.core.multi_sentence import (
    SentenceSearchResult,
    extract_answer,
    format_final_answer,
    split_into_sentences,
)
from scaffold_ai.infrastructure.paradigm_client import ParadigmClient

logger = logging.getLogger(__name__)

MULTI_SENTENCE_WORKFLOW = "multi_sentence_workflow"

WEB_SEARCH_UNAVAILABLE = (
    "Web search is not available through the Paradigm API in this "
    "deployment; the step was skipped."
)


def error_text(error: BaseException) -> str:
    """Human-readable message for any exception."""
    if isinstance(error, ScaffoldError):
        return error.message
    return str(error) or "Unknown error"


def failure_context(error: BaseException, step: str | None = None) -> ErrorContext:
    """Where a failure happened: the step, plus the upstream endpoint when known."""
    endpoint = error.context.endpoint if isinstance(error, ScaffoldError) else None
    return ErrorContext(step=step, endpoint=endpoint)


def step_label(step: Any, index: int) -> str:
    if isinstance(step, dict):
        label = step.get("name") or step.get("type") or step.get("operation")
        if label:
            return str(label)
    return f"step_{index + 1}"


class WorkflowExecutor:
    """Routes step type -> Paradigm call. Explicit registration, no auto-discovery."""

    def __init__(self, paradigm: ParadigmClient):
        self._paradigm = paradigm

        # every alias explicit: adding a step kind means editing this dict
        self._handlers = {
            "document_search": self._document_search,
            "docsearch": self._document_search,

            "document_analysis": self._document_analysis,
            "docanalysis": self._document_analysis,

            "image_analysis": self._image_analysis,
            "imageanalysis": self._image_analysis,

            "query": self._query,
            "search": self._query,

            "chat": self._chat_completion,
            "chat_completion": self._chat_completion,
            "completion": self._chat_completion,

            "web_search": self._web_search,
            "websearch": self._web_search,
        }

    # ─── Entry points ────────────────────────────────────────────

    async def run(self, workflow_type: str | None, parameters: dict) -> dict:
        """Execute a request. Returns {"result": ..., "explanation": str}."""
        if workflow_type == MULTI_SENTENCE_WORKFLOW:
            user_input = parameters.get("user_input") or parameters.get("query")
            if not user_input or not isinstance(user_input, str):
                raise WorkflowExecutionError(
                    "Multi-sentence workflow requires a non-empty user_input parameter.",
                )
            return await self.execute_multi_sentence(user_input)

        result = await self.execute(parameters)
        return {"result": result, "explanation": result.get("explanation", "")}

    async def execute(self, parameters: dict) -> dict:
        """Run a step list, a single typed operation, or an inferred search."""
        steps = parameters.get("steps")
        initial = parameters.get("context") or {}
        if not isinstance(initial, dict):
            raise InvalidRequestError("Invalid parameters: context must be an object.")
        context = dict(initial)

        if isinstance(steps, list):
            return await self._execute_steps(steps, context)

        if parameters.get("type") or parameters.get("operation"):
            try:
                result = await self.execute_step(parameters, context)
            except StepSkipped as e:
                return {"result": None, "context": context, "explanation": e.message}
            except Exception as e:
                raise WorkflowExecutionError(
                    f"Single operation failed: {error_text(e)}",
                    failure_context(e, step_label(parameters, 0)),
                ) from e
            return {"result": result, "context": context}

        if parameters.get("query"):
            try:
                result = await self._document_search(parameters)
            except Exception as e:
                raise WorkflowExecutionError(
                    f"Document search failed: {error_text(e)}",
                    failure_context(e, "document_search"),
                ) from e
            return {"result": result, "context": context}

        raise WorkflowExecutionError(
            "Unable to determine workflow operation type. Please provide "
            "either a steps array or specify the operation type.",
        )

    async def execute_step(self, step: dict, context: dict) -> Any:
        """Render one step against the context and dispatch it."""
        if not isinstance(step, dict):
            raise ValueError("Step must be a JSON object")
        step_type = step.get("type") or step.get("operation")
        handler = self._handlers.get(step_type)
        if not handler:
            raise ValueError(f"Unknown or unsupported step type: {step_type}")
        return await handler(render_step(step, context))

    async def _execute_steps(self, steps: list, context: dict) -> dict:
        results = []
        explanation = ""

        for index, step in enumerate(steps):
            label = step_label(step, index)
            try:
                step_result = await self.execute_step(step, context)
            except StepSkipped as e:
                note = f"Skipped: {e.message}"
            except Exception as e:
                note = f"Failed with error: {error_text(e)}"
                logger.warning(
                    f"Workflow step failed: {note}",
                    extra=failure_context(e, label).log_fields(),
                )
            else:
                results.append({
                    "step": label,
                    "result": step_result,
                    "timestamp": utc_timestamp(),
                })
                context[label] = step_result
                continue

            explanation += f"Step '{label}': {note}\n"
            results.append({
                "step": label,
                "result": None,
                "explanation": note,
                "timestamp": utc_timestamp(),
            })

        return {
            "workflow_results": results,
            "final_context": context,
            "explanation": explanation,
        }

    async def execute_multi_sentence(self, user_input: str) -> dict:
        """One document search per sentence, answers collected in order."""
        sentences = split_into_sentences(user_input)
        searches: list[SentenceSearchResult] = []

        for number, sentence in enumerate(sentences, start=1):
            logger.info(
                f"Searching for sentence {number}",
                extra={"step": f"sentence_{number}_search"},
            )
            try:
                found = await self._paradigm.sentence_search(sentence)
            except Exception as e:
                logger.warning(f"Error searching for sentence '{sentence}': {error_text(e)}")
                searches.append(SentenceSearchResult(
                    sentence, None, f'Error: Could not search for "{sentence}"',
                ))
                continue
            searches.append(SentenceSearchResult(sentence, found, extract_answer(found)))

        successful = sum(1 for s in searches if s.succeeded)
        return {
            "result": {
                "workflow_results": [
                    {
                        "step": f"sentence_{number}_search",
                        "result": {
                            "content": s.answer,
                            "answer": s.answer,
                            "original_sentence": s.sentence,
                        },
                        "timestamp": utc_timestamp(),
                    }
                    for number, s in enumerate(searches, start=1)
                ],
                "final_answer": format_final_answer(searches),
                "final_context": {
                    "total_sentences": len(sentences),
                    "successful_searches": successful,
                },
            },
            "explanation": (
                f"Processed {len(sentences)} sentences with "
                f"{successful} successful searches"
            ),
        }

    # ─── Step handlers ───────────────────────────────────────────

    async def _document_search(self, step: dict) -> Any:
        return await self._paradigm.document_search(
            step.get("query"),
            model=step.get("model"),
            workspace_ids=step.get("workspace_ids"),
            file_ids=step.get("file_ids"),
            chat_session_id=step.get("chat_session_id"),
            company_scope=step.get("company_scope"),
            private_scope=step.get("private_scope"),
            tool=step.get("tool"),
            private=step.get("private"),
        )

    async def _document_analysis(self, step: dict) -> Any:
        return await self._paradigm.document_analysis(
            step.get("query"),
            step.get("document_ids"),
            model=step.get("model"),
            private=step.get("private"),
        )

    async def _image_analysis(self, step: dict) -> Any:
        return await self._paradigm.image_analysis(
            step.get("query"),
            step.get("document_ids"),
            model=step.get("model"),
            private=step.get("private"),
        )

    async def _query(self, step: dict) -> Any:
        return await self._paradigm.query(
            step.get("query"),
            collection=step.get("collection"),
            n=step.get("n"),
        )

    async def _chat_completion(self, step: dict) -> Any:
        return await self._paradigm.chat_completion(
            step.get("messages"),
            model=step.get("model"),
            temperature=step.get("temperature"),
            max_tokens=step.get("max_tokens"),
        )

    async def _web_search(self, step: dict) -> Any:
        raise StepSkipped(WEB_SEARCH_UNAVAILABLE)
