"""Health Probe - liveness endpoint for the hosting platform.

Invariants:
    - GET /api/v1/health/ always returns 200 if the process is up
    - Reports which upstream keys are configured, never their values
"""

from fastapi import APIRouter, Depends, status

from scaffold_ai.config import Settings, get_settings

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check(settings: Settings = Depends(get_settings)):
    """Basic liveness probe."""
    return {
        "status": "healthy",
        "service": "scaffold-ai",
        "version": "0.1.0",
        "configured": {
            "paradigm": bool(settings.paradigm_api_key),
            "openai": bool(settings.openai_api_key),
            "anthropic": bool(settings.anthropic_api_key),
        },
    }
