"""Template Catalog Routes - list templates and suggest the closest ones for a description."""

from fastapi import APIRouter

from scaffold_ai.core.workflow_templates import (
    WORKFLOW_TEMPLATES,
    explain_template_choice,
    get_template_suggestions,
)
from scaffold_ai.schemas.workflow import TemplateRequest

router = APIRouter(prefix="/api/workflow-templates", tags=["templates"])


@router.get("")
async def list_templates():
    return {"templates": [t.summary() for t in WORKFLOW_TEMPLATES]}


@router.post("/suggestions")
async def suggest_templates(body: TemplateRequest):
    """Top matches for a description, each with the reason it matched."""
    suggestions = get_template_suggestions(body.description)
    return {
        "suggestions": [
            {
                **t.summary(),
                "reason": explain_template_choice(t, body.description),
            }
            for t in suggestions
        ],
    }
