"""Template Generator - template-first workflow generation with AI parameter repair.

Invariants:
    - Always returns a TemplateGenerationResult (never raises)
    - Confidence: 0.9 direct template fill, 0.7 after AI repair,
      0.3 when repaired params still fail validation, 0.0 on any failure
    - fallback_to_ai is True whenever no workflow was produced
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from scaffold_ai.core.workflow_templates import (
    WorkflowTemplate,
    customize_template,
    explain_template_choice,
    extract_parameters,
    find_best_template,
)
from scaffold_ai.infrastructure.openai_client import OpenAIClient, first_message_content

logger = logging.getLogger(__name__)

_ENHANCE_SYSTEM = (
    "You are an expert at extracting workflow parameters from natural "
    "language descriptions. Return ONLY valid JSON without any markdown formatting."
)

_ENHANCE_PROMPT = """I have a workflow template that needs parameter enhancement. Here are the details:

Template: {name}
Description: {description}
Required Parameters: {required}
Optional Parameters: {optional}

User Description: "{user_description}"

Extracted Parameters: {extracted}

Validation Errors: {errors}

Please help me extract or infer the missing parameters from the user description. Return ONLY a JSON object with the corrected parameters. If you cannot determine a parameter, use a reasonable default or placeholder.

Example response format:
{{
  "query": "extracted or inferred query",
  "document_ids": ["default_document_id"],
  "model": "alfred-4.2"
}}"""


@dataclass
class TemplateGenerationResult:
    success: bool
    workflow: dict | None
    template: WorkflowTemplate | None
    confidence: float
    errors: list[str] = field(default_factory=list)
    fallback_to_ai: bool = False
    explanation: str | None = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "workflow": self.workflow,
            "template": self.template.summary() if self.template else None,
            "confidence": self.confidence,
            "errors": list(self.errors),
            "fallback_to_ai": self.fallback_to_ai,
            "explanation": self.explanation,
        }


def build_enhance_prompt(
    template: WorkflowTemplate,
    user_description: str,
    extracted: dict,
    errors: list[str],
) -> str:
    return _ENHANCE_PROMPT.format(
        name=template.name,
        description=template.description,
        required=", ".join(template.required_params),
        optional=", ".join(template.optional_params),
        user_description=user_description,
        extracted=json.dumps(extracted, indent=2),
        errors=", ".join(errors),
    )


class TemplateGenerator:
    """Fills templates from descriptions; asks OpenAI for what regexes miss."""

    def __init__(self, openai: OpenAIClient | None, model: str = "gpt-4"):
        self._openai = openai
        self._model = model

    async def generate(self, user_description: str) -> TemplateGenerationResult:
        template = find_best_template(user_description)
        if template is None:
            return TemplateGenerationResult(
                success=False, workflow=None, template=None, confidence=0.0,
                errors=["No matching template found"], fallback_to_ai=True,
            )

        extracted = extract_parameters(template, user_description)
        validation = template.validate(extracted)
        if not validation.valid:
            return await self._enhance(
                template, user_description, extracted, validation.errors,
            )

        return TemplateGenerationResult(
            success=True,
            workflow=customize_template(template, extracted),
            template=template,
            confidence=0.9,
            explanation=explain_template_choice(template, user_description),
        )

    async def _enhance(
        self,
        template: WorkflowTemplate,
        user_description: str,
        extracted: dict,
        errors: list[str],
    ) -> TemplateGenerationResult:
        try:
            enhanced = await self._ask_for_parameters(
                template, user_description, extracted, errors,
            )
        except Exception as e:
            logger.warning(f"Template enhancement failed: {e}")
            return TemplateGenerationResult(
                success=False, workflow=None, template=template, confidence=0.0,
                errors=["Failed to enhance template with AI"], fallback_to_ai=True,
            )

        merged = {**extracted, **enhanced}
        final = template.validate(merged)
        if not final.valid:
            return TemplateGenerationResult(
                success=False, workflow=None, template=template, confidence=0.3,
                errors=final.errors, fallback_to_ai=True,
            )

        return TemplateGenerationResult(
            success=True,
            workflow=customize_template(template, merged),
            template=template,
            confidence=0.7,
            explanation=explain_template_choice(template, user_description),
        )

    async def _ask_for_parameters(
        self,
        template: WorkflowTemplate,
        user_description: str,
        extracted: dict,
        errors: list[str],
    ) -> dict[str, Any]:
        if self._openai is None:
            raise RuntimeError("OpenAI API key not set")
        data = await self._openai.chat_completion(
            [
                {"role": "system", "content": _ENHANCE_SYSTEM},
                {
                    "role": "user",
                    "content": build_enhance_prompt(
                        template, user_description, extracted, errors,
                    ),
                },
            ],
            model=self._model,
            temperature=0.3,
            max_tokens=500,
        )
        enhanced = json.loads(first_message_content(data) or "{}")
        if not isinstance(enhanced, dict):
            raise ValueError("Enhanced parameters must be a JSON object")
        return enhanced
